"""MCP Server for the Coda API.

This module provides a FastMCP-based MCP server exposing Coda documents,
pages, tables, rows, formulas and controls as tools. Page text is obtained
through Coda's asynchronous export workflow; multi-row updates run as
best-effort batches.
"""

import argparse
import logging
import sys
from contextlib import asynccontextmanager

from mcp.server import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.responses import Response

from .batch import BatchExecutor
from .client import CodaClient
from .config import Settings
from .config import get_settings
from .exceptions import ConfigurationError
from .export import ExportPollResolver
from .metrics_config import METRICS_ENABLED
from .metrics_config import ensure_metrics_initialized
from .metrics_config import get_metrics_export
from .metrics_config import get_metrics_summary
from .metrics_config import shutdown_metrics
from .tools import register_account_tools
from .tools import register_document_tools
from .tools import register_formula_tools
from .tools import register_page_tools
from .tools import register_row_tools
from .tools import register_search_tools
from .tools import register_table_tools

SERVER_NAME = "coda-enhanced"


def create_server(settings: Settings | None = None, client=None) -> FastMCP:
    """Build the MCP server with every Coda tool registered.

    Args:
        settings: Server settings, defaults to the global settings
        client: API client to use; built from ``settings`` when omitted

    Raises:
        ConfigurationError: If no client is given and no API key is configured.
    """
    settings = settings or get_settings()
    if client is None:
        client = CodaClient(settings.client_config())

    resolver = ExportPollResolver.from_settings(client, settings)
    executor = BatchExecutor(timeout=settings.batch_timeout)

    # Entered once per session; SSE runs one session per connection
    active_sessions = 0

    @asynccontextmanager
    async def lifespan(server: FastMCP):
        nonlocal active_sessions
        active_sessions += 1
        try:
            yield
        finally:
            active_sessions -= 1
            if active_sessions == 0:
                # The client reopens its pool on the next session's first request
                await client.aclose()

    mcp_server = FastMCP(
        name=SERVER_NAME,
        lifespan=lifespan,
        host=settings.sse_host,
        port=settings.sse_port,
        log_level=settings.log_level.upper(),
    )

    register_document_tools(mcp_server, client)
    register_page_tools(mcp_server, client, resolver)
    register_table_tools(mcp_server, client)
    register_row_tools(mcp_server, client, executor)
    register_formula_tools(mcp_server, client)
    register_account_tools(mcp_server, client)
    register_search_tools(mcp_server, client, resolver)

    @mcp_server.custom_route("/health", methods=["GET"], name="health")
    async def health_check(request: Request) -> Response:
        """Health check endpoint to verify server readiness."""
        return Response(status_code=200)

    @mcp_server.custom_route("/metrics", methods=["GET"], name="metrics")
    async def metrics_endpoint(request: Request) -> Response:
        """Prometheus metrics endpoint for monitoring MCP tool usage."""
        metrics_data, content_type = get_metrics_export()
        return Response(content=metrics_data, status_code=200, media_type=content_type)

    @mcp_server.custom_route("/metrics/summary", methods=["GET"], name="metrics_summary")
    async def metrics_summary_endpoint(request: Request) -> Response:
        """JSON summary of the metrics configuration."""
        return JSONResponse(get_metrics_summary())

    return mcp_server


# --- Main Server Execution ---
def main():
    """Run the main entry point for the server with argument parsing."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Coda MCP Server")
    parser.add_argument(
        "transport",
        choices=["sse", "stdio"],
        default="stdio",
        nargs="?",
        help="Transport: 'sse' for HTTP SSE or 'stdio' for standard I/O (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default=settings.sse_host,
        help=f"Host to bind to for SSE transport (default: {settings.sse_host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.sse_port,
        help=f"Port to bind to for SSE transport (default: {settings.sse_port})",
    )
    args = parser.parse_args()

    # stdout carries the stdio transport
    logging.basicConfig(level=settings.log_level.upper(), stream=sys.stderr)

    try:
        mcp_server = create_server(settings)
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)

    if settings.enable_metrics:
        ensure_metrics_initialized()
    print(f"Metrics: {'enabled' if METRICS_ENABLED and settings.enable_metrics else 'disabled'}", file=sys.stderr)

    try:
        if args.transport == "stdio":
            print("MCP server running with stdio transport. Waiting for client connection...", file=sys.stderr)
            mcp_server.run(transport="stdio")
        else:
            print(f"MCP server running with HTTP SSE transport on {args.host}:{args.port}", file=sys.stderr)
            print(f"SSE endpoint: http://{args.host}:{args.port}/sse", file=sys.stderr)
            print(f"Health endpoint: http://{args.host}:{args.port}/health", file=sys.stderr)
            print(f"Metrics endpoint: http://{args.host}:{args.port}/metrics", file=sys.stderr)
            mcp_server.settings.host = args.host
            mcp_server.settings.port = args.port
            mcp_server.run(transport="sse")
    finally:
        shutdown_metrics()


if __name__ == "__main__":
    main()
