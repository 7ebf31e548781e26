"""Document Management Tools.

This module contains MCP tools for Coda documents:
- coda_list_documents: List or search available documents
- coda_get_document: Get document metadata
- coda_create_document: Create a new document, optionally from a template
- coda_update_document: Change a document's title or icon
"""

from mcp.server import FastMCP
from mcp.types import CallToolResult
from pydantic import PositiveInt

from ..error_handler import json_result
from ..error_handler import tool_operation
from ..helpers import resolve_list_params
from ..logger_config import log_mcp_call


def register_document_tools(mcp_server: FastMCP, client) -> None:
    """Register all document management tools with the MCP server."""

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("list documents")
    async def coda_list_documents(
        query: str | None = None,
        limit: PositiveInt | None = None,
        is_owner: bool | None = None,
        is_published: bool | None = None,
        next_page_token: str | None = None,
    ) -> CallToolResult:
        """List or search available documents.

        Parameters:
            query (str, optional): Text to search document names for
            limit (int, optional): Maximum number of results to return
            is_owner (bool, optional): Show only docs owned by the user
            is_published (bool, optional): Show only published docs
            next_page_token (str, optional): Token from a previous call to fetch the next
                page of results; when given, ``limit`` is ignored

        Returns:
            The API's document list as JSON, including ``nextPageToken`` when more
            results are available.
        """
        params = resolve_list_params(limit, next_page_token)
        data = await client.list_docs(
            query=query,
            limit=params.limit,
            page_token=params.page_token,
            is_owner=is_owner,
            is_published=is_published,
        )
        return json_result(data)

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get document")
    async def coda_get_document(doc_id: str) -> CallToolResult:
        """Get information about a document."""
        return json_result(await client.get_doc(doc_id))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("create document")
    async def coda_create_document(
        title: str,
        source_doc: str | None = None,
        folder_id: str | None = None,
    ) -> CallToolResult:
        """Create a new document.

        Parameters:
            title (str): Title of the new document
            source_doc (str, optional): ID of a document to copy as a template
            folder_id (str, optional): ID of the folder to create the document in
        """
        return json_result(await client.create_doc(title, source_doc=source_doc, folder_id=folder_id))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("update document")
    async def coda_update_document(
        doc_id: str,
        title: str | None = None,
        icon_name: str | None = None,
    ) -> CallToolResult:
        """Update document properties such as its title or icon."""
        return json_result(await client.update_doc(doc_id, title=title, icon_name=icon_name))
