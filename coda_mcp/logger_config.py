"""Logging setup for the Coda MCP server.

Two loggers are configured here:
- ``mcp_call_logger`` records every tool invocation and its result.
- ``error_logger`` writes structured JSON records for failures.

Both write to rotating files, never to stdout, because stdout carries the
MCP stdio transport.
"""

import datetime
import functools
import inspect
import json
import logging
import os
import traceback
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from .metrics_config import record_tool_call_error
from .metrics_config import record_tool_call_start
from .metrics_config import record_tool_call_success

LOG_DIR = Path(os.environ.get("CODA_MCP_LOG_DIR", Path(__file__).resolve().parent / "logs"))
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Attributes present on every LogRecord; anything else was passed through ``extra``.
_STANDARD_RECORD_ATTRS = set(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class ErrorCategory(Enum):
    """Severity categories for structured error logging."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


_CATEGORY_LEVELS = {
    ErrorCategory.CRITICAL: logging.CRITICAL,
    ErrorCategory.ERROR: logging.ERROR,
    ErrorCategory.WARNING: logging.WARNING,
    ErrorCategory.INFO: logging.INFO,
}


class StructuredLogFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


# --- Logging Setup ---
mcp_call_logger = logging.getLogger("mcp_call_logger")
mcp_call_logger.setLevel(logging.INFO)

# maxBytes: 10MB per file, backupCount: 5 files (total ~50MB)
file_handler = RotatingFileHandler(LOG_DIR / "mcp_calls.log", maxBytes=10 * 1024 * 1024, backupCount=5)
file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
mcp_call_logger.addHandler(file_handler)
mcp_call_logger.propagate = False

error_logger = logging.getLogger("error_logger")
error_logger.setLevel(logging.INFO)

error_file_handler = RotatingFileHandler(LOG_DIR / "errors.log", maxBytes=10 * 1024 * 1024, backupCount=5)
error_file_handler.setFormatter(StructuredLogFormatter())
error_logger.addHandler(error_file_handler)
error_logger.propagate = False


def log_structured_error(
    category: ErrorCategory,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    operation: str | None = None,
    **extra_fields: Any,
) -> None:
    """Write a structured error record to the error logger."""
    extra: dict[str, Any] = {"error_category": category.value}
    if operation:
        extra["operation"] = operation
    for key, value in {**(context or {}), **extra_fields}.items():
        # LogRecord refuses extras that shadow its own attributes
        extra[f"context_{key}" if key in _STANDARD_RECORD_ATTRS else key] = value

    error_logger.log(
        _CATEGORY_LEVELS[category],
        message,
        exc_info=exception,
        extra=extra,
    )


def _render(value: Any) -> str:
    if hasattr(value, "model_dump_json"):  # Pydantic v2 model
        return value.model_dump_json(indent=None, exclude_none=True)
    return repr(value)


def _result_size(result: Any) -> int:
    if isinstance(result, str):
        return len(result.encode("utf-8"))
    return len(str(result))


def _log_call_start(func_name: str, args: tuple, kwargs: dict) -> float | None:
    start_time = None
    try:
        start_time = record_tool_call_start(func_name, args, kwargs)
    except Exception as e:
        mcp_call_logger.warning(f"Metrics recording failed for {func_name}: {e}")

    try:
        logged_args = [_render(arg) for arg in args]
        logged_kwargs = {k: _render(v) for k, v in kwargs.items()}
        arg_str = f"args={logged_args}, kwargs={logged_kwargs}"
    except Exception as e:
        arg_str = f"args/kwargs logging error: {e}"

    mcp_call_logger.info(f"Calling tool: {func_name} with {arg_str}")
    return start_time


def _log_call_success(func_name: str, start_time: float | None, result: Any) -> None:
    try:
        # Tools report expected failures as error-flagged results
        if getattr(result, "isError", False):
            record_tool_call_error(func_name, start_time, None)
        else:
            record_tool_call_success(func_name, start_time, _result_size(result))
    except Exception as e:
        mcp_call_logger.warning(f"Metrics success recording failed for {func_name}: {e}")

    try:
        result_str = _render(result)
    except Exception as e:
        result_str = f"Result logging error: {e}"
    mcp_call_logger.info(f"Tool {func_name} returned: {result_str}")


def _log_call_error(func_name: str, start_time: float | None, error: Exception) -> None:
    try:
        record_tool_call_error(func_name, start_time, error)
    except Exception as metrics_error:
        mcp_call_logger.warning(f"Metrics error recording failed for {func_name}: {metrics_error}")

    mcp_call_logger.error(f"Tool {func_name} raised exception: {error}", exc_info=True)
    log_structured_error(
        category=ErrorCategory.ERROR,
        message=f"Tool {func_name} raised an unhandled exception",
        exception=error,
        operation="tool_execution",
        function=func_name,
    )


# --- Decorator for Logging MCP Calls with Metrics ---
def log_mcp_call(func):
    """Log arguments, results and failures of a tool function.

    Works for both plain and ``async`` tool functions.
    """
    func_name = getattr(func, "__name__", "unknown_function")

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = _log_call_start(func_name, args, kwargs)
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _log_call_error(func_name, start_time, e)
                raise
            _log_call_success(func_name, start_time, result)
            return result

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = _log_call_start(func_name, args, kwargs)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _log_call_error(func_name, start_time, e)
            raise
        _log_call_success(func_name, start_time, result)
        return result

    return wrapper
