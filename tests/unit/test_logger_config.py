"""Unit tests for logger_config module.

Covers the JSON formatter, structured error records and the
``log_mcp_call`` decorator for sync and async tools.
"""

import json
import logging
import sys

import pytest
from mcp.types import CallToolResult
from mcp.types import TextContent

from coda_mcp import logger_config
from coda_mcp.logger_config import ErrorCategory
from coda_mcp.logger_config import StructuredLogFormatter
from coda_mcp.logger_config import log_mcp_call
from coda_mcp.logger_config import log_structured_error


def make_record(**kwargs):
    record = logging.LogRecord(
        name="test_logger",
        level=logging.ERROR,
        pathname="test.py",
        lineno=10,
        msg="Test message",
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )
    for key, value in kwargs.items():
        setattr(record, key, value)
    return record


class TestStructuredLogFormatter:
    """Test suite for StructuredLogFormatter."""

    def test_basic_log_entry(self):
        log_data = json.loads(StructuredLogFormatter().format(make_record()))

        assert log_data["level"] == "ERROR"
        assert log_data["logger"] == "test_logger"
        assert log_data["message"] == "Test message"
        assert log_data["line"] == 10
        assert "timestamp" in log_data

    def test_exception_info(self):
        try:
            raise ValueError("Test exception")
        except ValueError:
            record = make_record(exc_info=sys.exc_info())

        log_data = json.loads(StructuredLogFormatter().format(record))

        assert log_data["exception"]["type"] == "ValueError"
        assert log_data["exception"]["message"] == "Test exception"
        assert log_data["exception"]["traceback"]

    def test_extra_fields_are_included(self):
        record = make_record(error_category="ERROR", doc_id="doc-1", _private="hidden")

        log_data = json.loads(StructuredLogFormatter().format(record))

        assert log_data["error_category"] == "ERROR"
        assert log_data["doc_id"] == "doc-1"
        assert "_private" not in log_data


class TestLogStructuredError:
    def test_logs_at_category_level(self, mocker):
        mock_logger = mocker.patch("coda_mcp.logger_config.error_logger")

        log_structured_error(ErrorCategory.WARNING, "careful", operation="coda_list_pages", doc_id="doc-1")

        args, kwargs = mock_logger.log.call_args
        assert args == (logging.WARNING, "careful")
        assert kwargs["extra"] == {"error_category": "WARNING", "operation": "coda_list_pages", "doc_id": "doc-1"}

    def test_context_and_exception(self, mocker):
        mock_logger = mocker.patch("coda_mcp.logger_config.error_logger")
        error = RuntimeError("boom")

        log_structured_error(ErrorCategory.ERROR, "failed", exception=error, context={"page_id_or_name": "Notes"})

        kwargs = mock_logger.log.call_args.kwargs
        assert kwargs["exc_info"] is error
        assert kwargs["extra"]["page_id_or_name"] == "Notes"

    def test_reserved_keys_are_prefixed(self, mocker):
        mock_logger = mocker.patch("coda_mcp.logger_config.error_logger")

        log_structured_error(ErrorCategory.ERROR, "failed", context={"name": "New Page", "message": "hi"})

        extra = mock_logger.log.call_args.kwargs["extra"]
        assert extra["context_name"] == "New Page"
        assert extra["context_message"] == "hi"
        assert "name" not in extra

    def test_real_logger_accepts_reserved_keys(self):
        log_structured_error(ErrorCategory.INFO, "recorded", context={"name": "Page", "args": [1]})


class TestLogMcpCall:
    def test_sync_function(self, mocker):
        mock_logger = mocker.patch("coda_mcp.logger_config.mcp_call_logger")

        @log_mcp_call
        def add(a, b):
            return a + b

        assert add(1, b=2) == 3
        messages = [call.args[0] for call in mock_logger.info.call_args_list]
        assert messages[0].startswith("Calling tool: add with")
        assert messages[1] == "Tool add returned: 3"

    @pytest.mark.asyncio
    async def test_async_function(self, mocker):
        mock_logger = mocker.patch("coda_mcp.logger_config.mcp_call_logger")

        @log_mcp_call
        async def fetch(doc_id):
            return CallToolResult(content=[TextContent(type="text", text="{}")])

        result = await fetch(doc_id="doc-1")

        assert result.isError is False
        assert "doc-1" in mock_logger.info.call_args_list[0].args[0]

    @pytest.mark.asyncio
    async def test_async_exception_is_logged_and_reraised(self, mocker):
        mocker.patch("coda_mcp.logger_config.mcp_call_logger")
        structured = mocker.patch("coda_mcp.logger_config.log_structured_error")

        @log_mcp_call
        async def explode():
            raise RuntimeError("kaboom")

        with pytest.raises(RuntimeError, match="kaboom"):
            await explode()

        assert structured.call_args.kwargs["function"] == "explode"

    @pytest.mark.asyncio
    async def test_error_result_is_recorded_as_error(self, mocker):
        mocker.patch("coda_mcp.logger_config.mcp_call_logger")
        record_error = mocker.patch("coda_mcp.logger_config.record_tool_call_error")
        record_success = mocker.patch("coda_mcp.logger_config.record_tool_call_success")

        @log_mcp_call
        async def failing_tool():
            return CallToolResult(content=[TextContent(type="text", text="Failed to x : y")], isError=True)

        await failing_tool()

        record_error.assert_called_once()
        record_success.assert_not_called()

    def test_wraps_preserves_name(self):
        @log_mcp_call
        def coda_whoami():
            """Docstring."""

        assert coda_whoami.__name__ == "coda_whoami"
        assert coda_whoami.__doc__ == "Docstring."

    def test_log_dir_exists(self):
        assert logger_config.LOG_DIR.is_dir()
