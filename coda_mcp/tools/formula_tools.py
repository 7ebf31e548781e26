"""Formula, Control and Button Tools.

This module contains MCP tools for named formulas, canvas controls and
button columns:
- coda_list_formulas, coda_get_formula
- coda_list_controls, coda_get_control
- coda_push_button
"""

from typing import Literal

from mcp.server import FastMCP
from mcp.types import CallToolResult
from pydantic import PositiveInt

from ..error_handler import json_result
from ..error_handler import tool_operation
from ..helpers import resolve_list_params
from ..logger_config import log_mcp_call


def register_formula_tools(mcp_server: FastMCP, client) -> None:
    """Register formula, control and button tools with the MCP server."""

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("list formulas")
    async def coda_list_formulas(
        doc_id: str,
        limit: PositiveInt | None = None,
        sort_by: Literal["name"] | None = None,
        next_page_token: str | None = None,
    ) -> CallToolResult:
        """List named formulas in a document."""
        params = resolve_list_params(limit, next_page_token)
        data = await client.list_formulas(doc_id, limit=params.limit, page_token=params.page_token, sort_by=sort_by)
        return json_result(data)

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get formula")
    async def coda_get_formula(doc_id: str, formula_id_or_name: str) -> CallToolResult:
        """Get details about a specific formula, including its current value."""
        return json_result(await client.get_formula(doc_id, formula_id_or_name))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("list controls")
    async def coda_list_controls(
        doc_id: str,
        limit: PositiveInt | None = None,
        sort_by: Literal["name"] | None = None,
        next_page_token: str | None = None,
    ) -> CallToolResult:
        """List controls (buttons, sliders, etc.) in a document."""
        params = resolve_list_params(limit, next_page_token)
        data = await client.list_controls(doc_id, limit=params.limit, page_token=params.page_token, sort_by=sort_by)
        return json_result(data)

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get control")
    async def coda_get_control(doc_id: str, control_id_or_name: str) -> CallToolResult:
        """Get details about a specific control, including its current value."""
        return json_result(await client.get_control(doc_id, control_id_or_name))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("push button")
    async def coda_push_button(
        doc_id: str,
        table_id_or_name: str,
        row_id_or_name: str,
        column_id_or_name: str,
    ) -> CallToolResult:
        """Push a button in a table row.

        Parameters:
            doc_id (str): The ID of the document containing the table
            table_id_or_name (str): The ID or name of the table
            row_id_or_name (str): The ID or name of the row holding the button
            column_id_or_name (str): The ID or name of the button column
        """
        return json_result(
            await client.push_button(doc_id, table_id_or_name, row_id_or_name, column_id_or_name)
        )
