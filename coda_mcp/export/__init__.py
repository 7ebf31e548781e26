"""Page content retrieval through the Coda export workflow.

The API exposes page text only as an asynchronous export job:
submit, poll the status until it finishes, then download the result.
``ExportPollResolver`` turns that into a single awaitable call.
"""

from .resolver import DEFAULT_OUTPUT_FORMAT
from .resolver import ExportPollResolver

__all__ = [
    "ExportPollResolver",
    "DEFAULT_OUTPUT_FORMAT",
]
