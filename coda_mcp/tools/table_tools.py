"""Table and Column Tools.

This module contains MCP tools for tables, views and their columns:
- coda_list_tables, coda_get_table: table passthrough
- coda_get_table_summary: table info, columns and sample rows in one call
- coda_list_columns, coda_get_column: column passthrough
"""

from typing import Any
from typing import Literal

from mcp.server import FastMCP
from mcp.types import CallToolResult
from pydantic import PositiveInt

from ..error_handler import json_result
from ..error_handler import tool_operation
from ..helpers import resolve_list_params
from ..logger_config import log_mcp_call

TableType = Literal["table", "view"]

SUMMARY_ROWS_FETCHED = 5
SUMMARY_SAMPLE_ROWS = 3


def summarize_table(table: dict[str, Any], columns: list[dict[str, Any]], rows: list[dict[str, Any]]) -> dict[str, Any]:
    """Combine table metadata, columns and sample rows into one summary."""
    display_column = next((column for column in columns if column.get("display")), None)
    return {
        "table": {
            "id": table.get("id"),
            "name": table.get("name"),
            "type": table.get("tableType"),
            "rowCount": table.get("rowCount"),
            "createdAt": table.get("createdAt"),
            "updatedAt": table.get("updatedAt"),
        },
        "columns": [
            {
                "name": column.get("name"),
                "id": column.get("id"),
                "type": (column.get("format") or {}).get("type"),
                "calculated": bool(column.get("calculated")),
                "display": bool(column.get("display")),
            }
            for column in columns
        ],
        "sampleData": rows[:SUMMARY_SAMPLE_ROWS],
        "stats": {
            "totalColumns": len(columns),
            "calculatedColumns": sum(1 for column in columns if column.get("calculated")),
            "displayColumn": display_column.get("name") if display_column else "Unknown",
        },
    }


def register_table_tools(mcp_server: FastMCP, client) -> None:
    """Register all table and column tools with the MCP server."""

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("list tables")
    async def coda_list_tables(
        doc_id: str,
        table_types: list[TableType] | None = None,
        limit: PositiveInt | None = None,
        next_page_token: str | None = None,
    ) -> CallToolResult:
        """List tables and views in a document.

        Parameters:
            doc_id (str): The ID of the document
            table_types (list[str], optional): Restrict to ``"table"`` and/or ``"view"``
            limit (int, optional): Maximum number of results to return
            next_page_token (str, optional): Token from a previous call; overrides ``limit``
        """
        params = resolve_list_params(limit, next_page_token)
        data = await client.list_tables(
            doc_id, limit=params.limit, page_token=params.page_token, table_types=table_types
        )
        return json_result(data)

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get table")
    async def coda_get_table(doc_id: str, table_id_or_name: str) -> CallToolResult:
        """Get details about a specific table or view."""
        return json_result(await client.get_table(doc_id, table_id_or_name))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get table summary")
    async def coda_get_table_summary(doc_id: str, table_id_or_name: str) -> CallToolResult:
        """Get a detailed summary of a table including row count and column info.

        Returns:
            JSON with ``table`` metadata, a ``columns`` list, up to three rows of
            ``sampleData`` and column ``stats``.
        """
        table = await client.get_table(doc_id, table_id_or_name)
        columns = await client.list_columns(doc_id, table_id_or_name)
        rows = await client.list_rows(doc_id, table_id_or_name, limit=SUMMARY_ROWS_FETCHED)
        return json_result(summarize_table(table, columns.get("items", []), rows.get("items", [])))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("list columns")
    async def coda_list_columns(
        doc_id: str,
        table_id_or_name: str,
        limit: PositiveInt | None = None,
        visible_only: bool | None = None,
        next_page_token: str | None = None,
    ) -> CallToolResult:
        """List columns in a table."""
        params = resolve_list_params(limit, next_page_token)
        data = await client.list_columns(
            doc_id,
            table_id_or_name,
            limit=params.limit,
            page_token=params.page_token,
            visible_only=visible_only,
        )
        return json_result(data)

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get column")
    async def coda_get_column(doc_id: str, table_id_or_name: str, column_id_or_name: str) -> CallToolResult:
        """Get details about a specific column."""
        return json_result(await client.get_column(doc_id, table_id_or_name, column_id_or_name))
