"""Direct access to registered Coda MCP tools.

Lets tests and scripts call tool functions on a server built by
``create_server`` without going through an MCP transport.
"""

from mcp.server import FastMCP


def get_mcp_tool(mcp_server: FastMCP, tool_name: str):
    """Get a registered MCP tool function by name."""
    if (
        hasattr(mcp_server, "_tool_manager")
        and hasattr(mcp_server._tool_manager, "_tools")
        and tool_name in mcp_server._tool_manager._tools
    ):
        tool = mcp_server._tool_manager._tools[tool_name]
        if hasattr(tool, "fn"):
            return tool.fn
    raise RuntimeError(f"MCP tool '{tool_name}' not found or not properly registered")


def list_tool_names(mcp_server: FastMCP) -> list[str]:
    """Names of all tools registered on ``mcp_server``."""
    return sorted(mcp_server._tool_manager._tools)


async def call_tool(mcp_server: FastMCP, tool_name: str, **arguments):
    """Invoke a tool function directly with keyword arguments."""
    return await get_mcp_tool(mcp_server, tool_name)(**arguments)
