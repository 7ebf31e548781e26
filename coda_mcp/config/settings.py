"""Centralized configuration management for the Coda MCP server.

This module provides a single source of truth for all configuration
including the API credential, endpoint, timeouts and export polling.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import AliasChoices
from pydantic import Field
from pydantic import model_validator
from pydantic_settings import BaseSettings

DEFAULT_API_BASE_URL = "https://coda.io/apis/v1"


class Settings(BaseSettings):
    """Centralized settings for the Coda MCP server."""

    # === Coda API ===
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("API_KEY", "CODA_API_KEY", "api_key"),
        description="Coda API token",
    )
    api_base_url: str = Field(default=DEFAULT_API_BASE_URL, description="Base URL of the Coda REST API")
    request_timeout: float = Field(default=30.0, gt=0, description="Timeout for a single API request")

    # === Page export polling ===
    export_poll_interval: float = Field(
        default=0.5, gt=0, description="Seconds to wait between export status checks"
    )
    export_max_wait: float = Field(
        default=30.0, gt=0, description="Maximum seconds to wait for a page export to finish"
    )

    # === Batch mutations ===
    batch_timeout: float | None = Field(
        default=None, gt=0, description="Overall deadline for a bulk row update, unbounded if unset"
    )

    # === Test Environment Detection ===
    pytest_current_test: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PYTEST_CURRENT_TEST", "pytest_current_test"),
        description="Test mode indicator",
    )

    # === HTTP SSE Server Configuration ===
    sse_host: str = Field(default="localhost", description="SSE server host")
    sse_port: int = Field(default=3001, description="SSE server port")

    # === Logging Configuration ===
    log_level: str = Field(default="INFO", description="Logging level")

    # === Performance Configuration ===
    enable_metrics: bool = Field(default=True, description="Enable metrics collection")

    model_config = {
        "env_prefix": "CODA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",  # Ignore extra environment variables
    }

    def __init__(self, **kwargs):
        """Initialize settings with environment-specific adjustments."""
        super().__init__(**kwargs)
        self._adjust_for_test_environment()

    def _adjust_for_test_environment(self):
        """Adjust settings for test environment."""
        if self.is_test_environment:
            # Never let a stuck request hold up the test run
            self.request_timeout = min(self.request_timeout, 10.0)

    @model_validator(mode="after")
    def validate_configuration(self):
        """Validate configuration consistency."""
        if self.export_poll_interval > self.export_max_wait:
            raise ValueError("export_poll_interval must not exceed export_max_wait")
        self.api_base_url = self.api_base_url.rstrip("/")
        # The API key is checked when the client is built, not here
        return self

    @property
    def is_test_environment(self) -> bool:
        """Check if running in test environment."""
        return "PYTEST_CURRENT_TEST" in os.environ or self.pytest_current_test is not None

    @property
    def api_key_configured(self) -> bool:
        """Check if the Coda API key is set."""
        return bool(self.api_key and self.api_key.strip())

    def client_config(self):
        """Build the immutable client configuration.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        from ..client import ClientConfig
        from ..exceptions import ConfigurationError

        if not self.api_key_configured:
            raise ConfigurationError(
                "The API_KEY environment variable is required to start the Coda MCP server. "
                "Please set API_KEY to your Coda API token.",
                setting="API_KEY",
            )
        return ClientConfig(
            api_key=self.api_key.strip(),
            base_url=self.api_base_url,
            timeout=self.request_timeout,
        )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        load_dotenv()  # Load .env file
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (primarily for testing)."""
    global _settings
    _settings = None
