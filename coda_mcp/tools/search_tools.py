"""Search and Analytics Tools.

This module contains MCP tools that combine several API calls:
- coda_search_tables: find tables by name
- coda_search_pages: find pages by name and, optionally, by content
- coda_get_document_stats: counts and name breakdowns for a document
"""

from typing import Any
from typing import Literal

from mcp.server import FastMCP
from mcp.types import CallToolResult

from ..error_handler import json_result
from ..error_handler import log_operation_start
from ..error_handler import log_operation_success
from ..error_handler import tool_operation
from ..export import ExportPollResolver
from ..helpers import matches_name
from ..logger_config import ErrorCategory
from ..logger_config import log_mcp_call
from ..logger_config import log_structured_error

BREAKDOWN_LIMIT = 10


async def find_content_matches(
    resolver: ExportPollResolver,
    doc_id: str,
    pages: list[dict[str, Any]],
    query: str,
    exclude_ids: set[str],
) -> list[dict[str, Any]]:
    """Pages whose text contains ``query``, skipping pages that cannot be exported."""
    needle = query.lower()
    matches = []
    for page in pages:
        if page.get("id") in exclude_ids:
            continue
        try:
            content = await resolver.resolve_content(doc_id, page["id"])
        except Exception as e:
            log_structured_error(
                category=ErrorCategory.WARNING,
                message=f"Skipping page {page.get('id')} in content search: {e}",
                exception=e,
                operation="search_pages",
                doc_id=doc_id,
                page_id=page.get("id"),
            )
            continue
        if content and needle in content.lower():
            matches.append({**page, "matchedInContent": True})
    return matches


def document_stats(
    doc: dict[str, Any],
    pages: list[dict[str, Any]],
    tables: list[dict[str, Any]],
    formulas: list[dict[str, Any]],
    controls: list[dict[str, Any]],
) -> dict[str, Any]:
    """Aggregate document metadata and object counts."""
    return {
        "document": {
            "id": doc.get("id"),
            "name": doc.get("name"),
            "owner": doc.get("owner"),
            "createdAt": doc.get("createdAt"),
            "updatedAt": doc.get("updatedAt"),
            "docSize": doc.get("docSize"),
        },
        "counts": {
            "pages": len(pages),
            "tables": sum(1 for table in tables if table.get("tableType") == "table"),
            "views": sum(1 for table in tables if table.get("tableType") == "view"),
            "formulas": len(formulas),
            "controls": len(controls),
        },
        "breakdown": {
            "tableNames": [{"name": table.get("name"), "type": table.get("tableType")} for table in tables],
            "pageNames": [page.get("name") for page in pages[:BREAKDOWN_LIMIT]],
            "formulaNames": [formula.get("name") for formula in formulas[:BREAKDOWN_LIMIT]],
        },
    }


def register_search_tools(mcp_server: FastMCP, client, resolver: ExportPollResolver) -> None:
    """Register search and analytics tools with the MCP server."""

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("search tables")
    async def coda_search_tables(
        doc_id: str,
        query: str,
        table_types: list[Literal["table", "view"]] | None = None,
    ) -> CallToolResult:
        """Search for tables in a document by name (case-insensitive)."""
        tables = await client.list_tables(doc_id, table_types=table_types)
        found = [table for table in tables.get("items", []) if matches_name(table, query)]
        return json_result({"items": found, "searchQuery": query, "totalFound": len(found)})

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("search pages")
    async def coda_search_pages(doc_id: str, query: str, include_content: bool = False) -> CallToolResult:
        """Search for pages by name or content within a document.

        Parameters:
            doc_id (str): The ID of the document to search in
            query (str): Text to look for, case-insensitive
            include_content (bool): Also search page text. Every page is exported,
                so this is much slower. Pages whose content cannot be retrieved are
                skipped.

        Returns:
            JSON with ``items`` (name matches first, then content matches flagged
            ``matchedInContent``), ``searchQuery``, ``searchedContent`` and ``totalFound``.
        """
        pages = (await client.list_pages(doc_id)).get("items", [])
        found = [page for page in pages if matches_name(page, query)]
        if include_content:
            found += await find_content_matches(
                resolver, doc_id, pages, query, exclude_ids={page.get("id") for page in found}
            )
        return json_result(
            {
                "items": found,
                "searchQuery": query,
                "searchedContent": include_content,
                "totalFound": len(found),
            }
        )

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get document stats")
    async def coda_get_document_stats(doc_id: str) -> CallToolResult:
        """Get statistics and insights about a document.

        Returns:
            JSON with ``document`` metadata, ``counts`` of pages, tables, views,
            formulas and controls, and a ``breakdown`` of names (first 10 pages and formulas).
        """
        log_operation_start("get_document_stats", doc_id=doc_id)
        doc = await client.get_doc(doc_id)
        pages = await client.list_pages(doc_id)
        tables = await client.list_tables(doc_id)
        formulas = await client.list_formulas(doc_id)
        controls = await client.list_controls(doc_id)

        stats = document_stats(
            doc,
            pages.get("items", []),
            tables.get("items", []),
            formulas.get("items", []),
            controls.get("items", []),
        )
        log_operation_success("get_document_stats", stats, doc_id=doc_id)
        return json_result(stats)
