"""The pytest configuration for Coda MCP testing.

Provides a mocked Coda API client, fast test settings and a fully
registered server built around them.
"""

import os
import tempfile

# Keep test runs from writing logs into the package or exporting metrics
os.environ.setdefault("CODA_MCP_LOG_DIR", tempfile.mkdtemp(prefix="coda_mcp_logs_"))
os.environ.setdefault("MCP_METRICS_ENABLED", "false")

from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402

from coda_mcp.client import CodaClient  # noqa: E402
from coda_mcp.coda_tool_server import create_server  # noqa: E402
from coda_mcp.config import Settings  # noqa: E402
from coda_mcp.config import reset_settings  # noqa: E402
from coda_mcp.export import ExportPollResolver  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop the cached global settings around every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings():
    """Settings with a dummy credential and fast export polling."""
    return Settings(
        api_key="test-api-key",
        export_poll_interval=0.01,
        export_max_wait=0.5,
    )


@pytest.fixture
def mock_client():
    """An ``AsyncMock`` standing in for ``CodaClient``."""
    return AsyncMock(spec=CodaClient)


@pytest.fixture
def resolver(mock_client):
    return ExportPollResolver(mock_client, poll_interval=0.01, max_wait=0.5)


@pytest.fixture
def server(settings, mock_client):
    """A server with every tool registered against the mocked client."""
    return create_server(settings, client=mock_client)


@pytest.fixture
def script_export(mock_client):
    """Script the mocked client through a successful export of the given text."""

    def _script(content="", export_id="export-1", polls_in_progress=0):
        mock_client.begin_page_export.return_value = {"id": export_id, "status": "inProgress"}
        mock_client.get_page_export_status.side_effect = [{"status": "inProgress"}] * polls_in_progress + [
            {"status": "complete", "downloadLink": f"https://downloads.example/{export_id}"}
        ]
        mock_client.fetch_download.return_value = content
        return mock_client

    return _script


# Custom markers for pytest
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: fast tests with mocked dependencies")
