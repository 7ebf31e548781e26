"""Error handling utilities for Coda MCP tools.

Tools report expected failures as an error-flagged ``CallToolResult`` whose
only text is ``"Failed to <operation> : <reason>"``; they never raise to the
MCP framework for those.
"""

from __future__ import annotations

import functools
import logging
from typing import Any

from mcp.types import CallToolResult
from mcp.types import TextContent

from .exceptions import CodaMCPError
from .exceptions import ValidationError
from .helpers import to_json_text
from .logger_config import ErrorCategory
from .logger_config import log_structured_error

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error has occurred"


def error_message(error: BaseException) -> str:
    """Human-readable reason for a failure."""
    if isinstance(error, CodaMCPError):
        return error.user_message or UNKNOWN_ERROR_MESSAGE
    return str(error) or UNKNOWN_ERROR_MESSAGE


def text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def json_result(data: Any) -> CallToolResult:
    """Successful tool result carrying an API payload as indented JSON."""
    return text_result(to_json_text(data))


def tool_error_result(operation: str, error: BaseException) -> CallToolResult:
    """Error-flagged tool result for a failed operation."""
    return text_result(f"Failed to {operation} : {error_message(error)}", is_error=True)


def handle_mcp_tool_error(
    tool_name: str,
    operation: str,
    error: Exception,
    context: dict[str, Any] | None = None,
) -> CallToolResult:
    """Log a tool failure and turn it into the error-flagged result.

    Args:
        tool_name: Name of the tool that failed
        operation: Operation label used in the error text, e.g. ``"list pages"``
        error: The exception that occurred
        context: Additional context such as tool arguments
    """
    logger.error(f"Tool {tool_name} failed: {error}", extra={"context": context or {}})

    if isinstance(error, CodaMCPError):
        category = ErrorCategory.WARNING if isinstance(error, ValidationError) else ErrorCategory.ERROR
        log_structured_error(
            category=category,
            message=f"Failed to {operation}: {error.message}",
            exception=error,
            context=context,
            operation=tool_name,
            error_code=error.error_code,
            details=error.details,
        )
    else:
        log_structured_error(
            category=ErrorCategory.ERROR,
            message=f"Unexpected error while trying to {operation}: {error}",
            exception=error,
            context=context,
            operation=tool_name,
            error_type=type(error).__name__,
        )

    return tool_error_result(operation, error)


def tool_operation(operation: str):
    """Decorate an async tool so any failure becomes ``Failed to <operation> : <reason>``.

    ``asyncio.CancelledError`` is not an ``Exception`` and still propagates.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                return handle_mcp_tool_error(func.__name__, operation, e, context=kwargs)

        return wrapper

    return decorator


def log_operation_start(operation_name: str, **context) -> None:
    """Log the start of an operation."""
    logger.info(f"Starting operation: {operation_name}", extra={"context": context})


def log_operation_success(operation_name: str, result: Any = None, **context) -> None:
    """Log the successful completion of an operation."""
    result_info = {}
    if isinstance(result, dict):
        result_info["result_keys"] = sorted(result)
    elif isinstance(result, list | tuple):
        result_info["result_count"] = len(result)
    elif isinstance(result, str):
        result_info["result_length"] = len(result)

    logger.info(
        f"Operation completed successfully: {operation_name}",
        extra={"context": context, "result_info": result_info},
    )
