"""Coda REST API client."""

from .api import ClientConfig
from .api import CodaClient

__all__ = ["ClientConfig", "CodaClient"]
