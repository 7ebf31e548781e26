"""Account Tools.

- coda_whoami: information about the token's user
- coda_resolve_link: map a browser URL to the API resource it points at
"""

from mcp.server import FastMCP
from mcp.types import CallToolResult

from ..error_handler import json_result
from ..error_handler import tool_operation
from ..logger_config import log_mcp_call


def register_account_tools(mcp_server: FastMCP, client) -> None:
    """Register account tools with the MCP server."""

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get user info")
    async def coda_whoami() -> CallToolResult:
        """Get information about the current user."""
        return json_result(await client.whoami())

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("resolve link")
    async def coda_resolve_link(url: str) -> CallToolResult:
        """Resolve a Coda browser link to the document, page, table or row it points at."""
        return json_result(await client.resolve_browser_link(url))
