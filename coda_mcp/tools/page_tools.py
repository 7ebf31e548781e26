"""Page Tools.

This module contains MCP tools for pages within a document:
- coda_list_pages, coda_create_page, coda_delete_page: page passthrough
- coda_get_page_content, coda_peek_page: page text through the export workflow
- coda_replace_page_content, coda_append_page_content: canvas updates
- coda_duplicate_page, coda_rename_page: single-item page pipelines
"""

from mcp.server import FastMCP
from mcp.types import CallToolResult
from pydantic import PositiveInt

from ..batch import append_page_content
from ..batch import duplicate_page
from ..batch import rename_page
from ..batch import replace_page_content
from ..batch.pipelines import canvas_content
from ..error_handler import json_result
from ..error_handler import text_result
from ..error_handler import tool_operation
from ..export import ExportPollResolver
from ..helpers import resolve_list_params
from ..logger_config import log_mcp_call


def register_page_tools(mcp_server: FastMCP, client, resolver: ExportPollResolver) -> None:
    """Register all page tools with the MCP server."""

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("list pages")
    async def coda_list_pages(
        doc_id: str,
        limit: PositiveInt | None = None,
        next_page_token: str | None = None,
    ) -> CallToolResult:
        """List pages in a document with pagination.

        Parameters:
            doc_id (str): The ID of the document to list pages from
            limit (int, optional): The number of pages to return, defaults to 25 on the API side
            next_page_token (str, optional): The token returned by a previous call to get
                the next page of results. The page size of a continued listing is fixed by
                the first call, so ``limit`` is not sent along with a token.
        """
        params = resolve_list_params(limit, next_page_token)
        data = await client.list_pages(doc_id, limit=params.limit, page_token=params.page_token)
        return json_result(data)

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("create page")
    async def coda_create_page(
        doc_id: str,
        name: str,
        content: str | None = None,
        parent_page_id: str | None = None,
        subtitle: str | None = None,
        icon_name: str | None = None,
    ) -> CallToolResult:
        """Create a page in a document.

        Parameters:
            doc_id (str): The ID of the document to create the page in
            name (str): The name of the page to create
            content (str, optional): Markdown content of the page
            parent_page_id (str, optional): The ID of the parent page to nest the page under
            subtitle (str, optional): Subtitle for the page
            icon_name (str, optional): Icon name for the page
        """
        body = {
            "name": name,
            "subtitle": subtitle,
            "iconName": icon_name,
            "parentPageId": parent_page_id,
            "pageContent": {
                "type": "canvas",
                # The API rejects an empty canvas
                "canvasContent": canvas_content(content or " "),
            },
        }
        body = {key: value for key, value in body.items() if value is not None}
        return json_result(await client.create_page(doc_id, body))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("delete page")
    async def coda_delete_page(doc_id: str, page_id_or_name: str) -> CallToolResult:
        """Delete a page from a document."""
        return json_result(await client.delete_page(doc_id, page_id_or_name))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("get page content")
    async def coda_get_page_content(doc_id: str, page_id_or_name: str) -> CallToolResult:
        """Get the content of a page as markdown.

        The page is exported on the Coda side, which can take a few seconds for
        large pages. An empty page returns empty text.
        """
        return text_result(await resolver.resolve_content(doc_id, page_id_or_name))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("peek page")
    async def coda_peek_page(doc_id: str, page_id_or_name: str, num_lines: PositiveInt) -> CallToolResult:
        """Peek into the beginning of a page and return a limited number of lines.

        Parameters:
            doc_id (str): The ID of the document that contains the page
            page_id_or_name (str): The ID or name of the page to peek into
            num_lines (int): The number of lines to return from the start of the page,
                usually 30 lines is enough
        """
        return text_result(await resolver.peek_content(doc_id, page_id_or_name, num_lines))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("replace page content")
    async def coda_replace_page_content(doc_id: str, page_id_or_name: str, content: str) -> CallToolResult:
        """Replace the content of a page with new markdown content."""
        return json_result(await replace_page_content(client, doc_id, page_id_or_name, content))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("append page content")
    async def coda_append_page_content(doc_id: str, page_id_or_name: str, content: str) -> CallToolResult:
        """Append markdown content to the end of a page."""
        return json_result(await append_page_content(client, doc_id, page_id_or_name, content))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("duplicate page")
    async def coda_duplicate_page(doc_id: str, page_id_or_name: str, new_name: str) -> CallToolResult:
        """Duplicate a page in a document.

        The source page's content is read first; if that fails no page is created.
        """
        return json_result(await duplicate_page(client, resolver, doc_id, page_id_or_name, new_name))

    @mcp_server.tool()
    @log_mcp_call
    @tool_operation("rename page")
    async def coda_rename_page(
        doc_id: str,
        page_id_or_name: str,
        new_name: str,
        subtitle: str | None = None,
    ) -> CallToolResult:
        """Rename a page, optionally setting a new subtitle."""
        return json_result(await rename_page(client, doc_id, page_id_or_name, new_name, subtitle))
