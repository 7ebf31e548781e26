"""Row Tools.

This module contains MCP tools for table rows:
- coda_list_rows, coda_get_row: read rows
- coda_create_rows, coda_update_row: write rows from ``{column: value}`` maps
- coda_delete_row, coda_delete_rows: remove rows
- coda_bulk_update_rows: best-effort multi-row update with per-row results
"""

from typing import Any
from typing import Literal

from mcp.server import FastMCP
from mcp.types import CallToolResult
from pydantic import PositiveInt

from ..batch import BatchExecutor
from ..batch import BatchItem
from ..batch import BatchReport
from ..error_handler import json_result
from ..error_handler import tool_operation
from ..helpers import resolve_list_params
from ..helpers import values_to_cells
from ..logger_config import log_mcp_call
from ..models import RowUpdate


def bulk_update_payload(report: BatchReport) -> dict[str, Any]:
    """Render a bulk row update report in the tool's response shape."""
    results = []
    for outcome in report.results:
        entry: dict[str, Any] = {"rowId": outcome.target_id, "success": outcome.success}
        if outcome.success:
            entry["data"] = outcome.data
        else:
            entry["error"] = outcome.error
        results.append(entry)
    return {
        "results": results,
        "totalUpdates": report.total_count,
        "successful": report.success_count,
        "failed": report.failure_count,
        "summary": report.summary,
    }


def register_row_tools(mcp_server: FastMCP, client, executor: BatchExecutor) -> None:
    """Register all row tools with the MCP server."""

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("list rows")
    async def coda_list_rows(
        doc_id: str,
        table_id_or_name: str,
        query: str | None = None,
        limit: PositiveInt | None = None,
        sort_by: Literal["createdAt", "natural", "updatedAt"] | None = None,
        use_column_names: bool | None = None,
        visible_only: bool | None = None,
        next_page_token: str | None = None,
    ) -> CallToolResult:
        """List rows in a table with optional filtering.

        Parameters:
            doc_id (str): The ID of the document containing the table
            table_id_or_name (str): The ID or name of the table
            query (str, optional): Filter in the form ``<column>:<value>``
            limit (int, optional): Maximum number of rows to return
            sort_by (str, optional): ``createdAt``, ``natural`` or ``updatedAt``
            use_column_names (bool, optional): Key cell values by column name instead of ID
            visible_only (bool, optional): Return only visible rows and columns
            next_page_token (str, optional): Token from a previous call; overrides ``limit``
        """
        params = resolve_list_params(limit, next_page_token)
        data = await client.list_rows(
            doc_id,
            table_id_or_name,
            query=query,
            limit=params.limit,
            page_token=params.page_token,
            sort_by=sort_by,
            use_column_names=use_column_names,
            visible_only=visible_only,
        )
        return json_result(data)

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get row")
    async def coda_get_row(
        doc_id: str,
        table_id_or_name: str,
        row_id_or_name: str,
        use_column_names: bool | None = None,
    ) -> CallToolResult:
        """Get a specific row from a table."""
        return json_result(
            await client.get_row(doc_id, table_id_or_name, row_id_or_name, use_column_names=use_column_names)
        )

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("create rows")
    async def coda_create_rows(
        doc_id: str,
        table_id_or_name: str,
        rows: list[dict[str, Any]],
        key_columns: list[str] | None = None,
    ) -> CallToolResult:
        """Create or update multiple rows in a table.

        Parameters:
            rows (list[dict]): Row objects with column names or IDs as keys
            key_columns (list[str], optional): Columns used as upsert keys; rows matching
                on these columns are updated instead of inserted
        """
        formatted_rows = [{"cells": values_to_cells(row)} for row in rows]
        return json_result(
            await client.upsert_rows(doc_id, table_id_or_name, formatted_rows, key_columns=key_columns)
        )

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("update row")
    async def coda_update_row(
        doc_id: str,
        table_id_or_name: str,
        row_id_or_name: str,
        values: dict[str, Any],
    ) -> CallToolResult:
        """Update a specific row in a table."""
        return json_result(
            await client.update_row(doc_id, table_id_or_name, row_id_or_name, values_to_cells(values))
        )

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("delete row")
    async def coda_delete_row(doc_id: str, table_id_or_name: str, row_id_or_name: str) -> CallToolResult:
        """Delete a specific row from a table."""
        return json_result(await client.delete_row(doc_id, table_id_or_name, row_id_or_name))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("delete rows")
    async def coda_delete_rows(doc_id: str, table_id_or_name: str, row_ids: list[str]) -> CallToolResult:
        """Delete multiple rows from a table."""
        return json_result(await client.delete_rows(doc_id, table_id_or_name, row_ids))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("bulk update rows")
    async def coda_bulk_update_rows(
        doc_id: str,
        table_id_or_name: str,
        updates: list[RowUpdate],
    ) -> CallToolResult:
        """Update multiple rows in a table with different values.

        Rows are updated one after another. A failing row does not stop the
        remaining updates and earlier updates are kept.

        Returns:
            JSON with one ``results`` entry per update (``rowId``, ``success`` and
            ``data`` or ``error``) plus ``totalUpdates``, ``successful`` and ``failed``.
        """

        async def update_one(table: str, item: BatchItem) -> Any:
            return await client.update_row(doc_id, table, item.target_id, values_to_cells(item.payload))

        items = [
            BatchItem(target_id=update.row_id_or_name, payload=update.values)
            for update in (RowUpdate.model_validate(u) for u in updates)
        ]
        report = await executor.apply_batch(table_id_or_name, items, update_one)
        return json_result(bulk_update_payload(report))
