"""Unit tests for the custom exception hierarchy."""

from __future__ import annotations

import pytest

from coda_mcp.exceptions import BatchTimeoutError
from coda_mcp.exceptions import CodaAPIError
from coda_mcp.exceptions import CodaMCPError
from coda_mcp.exceptions import ConfigurationError
from coda_mcp.exceptions import ExportResultMissingError
from coda_mcp.exceptions import ExportTimeoutError
from coda_mcp.exceptions import PipelineStepError
from coda_mcp.exceptions import RetrievalError
from coda_mcp.exceptions import TransportError
from coda_mcp.exceptions import UpstreamExportError
from coda_mcp.exceptions import ValidationError


class TestCodaMCPError:
    """Tests for the base CodaMCPError class."""

    def test_basic_initialization(self):
        """Test basic exception creation."""
        error = CodaMCPError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.error_code == "UNKNOWN_ERROR"
        assert error.details == {}
        assert error.user_message == "Something went wrong"

    def test_with_all_parameters(self):
        error = CodaMCPError(
            message="Technical error",
            error_code="CUSTOM_ERROR",
            details={"key": "value"},
            user_message="User-friendly message",
        )

        assert error.message == "Technical error"
        assert error.error_code == "CUSTOM_ERROR"
        assert error.details == {"key": "value"}
        assert error.user_message == "User-friendly message"

    def test_to_dict(self):
        """Test conversion to dictionary."""
        error = CodaMCPError(
            message="Test error",
            error_code="TEST_ERROR",
            details={"info": "data"},
            user_message="Test message",
        )

        assert error.to_dict() == {
            "error_type": "CodaMCPError",
            "error_code": "TEST_ERROR",
            "message": "Test error",
            "user_message": "Test message",
            "details": {"info": "data"},
        }


class TestConfigurationAndValidation:
    def test_configuration_error_records_setting(self):
        error = ConfigurationError("API_KEY is required", setting="API_KEY")

        assert error.error_code == "CONFIGURATION_ERROR"
        assert error.details == {"setting": "API_KEY"}

    def test_validation_error_records_field_and_value(self):
        error = ValidationError("bad limit", field="limit", value=0)

        assert error.error_code == "VALIDATION_ERROR"
        assert error.details == {"field": "limit", "invalid_value": 0}

    def test_validation_error_without_context(self):
        assert ValidationError("bad").details == {}

    def test_validation_error_none_value_not_recorded(self):
        error = ValidationError("bad", field="num_lines", value=None)
        assert error.details == {"field": "num_lines"}


class TestTransportErrors:
    def test_transport_error_details(self):
        error = TransportError("ConnectError: refused", method="GET", url="https://coda.io/apis/v1/whoami")

        assert error.error_code == "TRANSPORT_ERROR"
        assert error.details == {"method": "GET", "url": "https://coda.io/apis/v1/whoami"}

    def test_api_error_is_a_transport_error(self):
        error = CodaAPIError("Not Found (404): Page not found", status_code=404, method="GET")

        assert isinstance(error, TransportError)
        assert error.status_code == 404
        assert error.error_code == "CODA_API_ERROR"
        assert error.details == {"status_code": 404, "method": "GET"}


class TestRetrievalErrors:
    """The three export outcomes stay distinguishable."""

    def test_upstream_export_error(self):
        error = UpstreamExportError("doc-1", "page-1", "Page too large")

        assert isinstance(error, RetrievalError)
        assert str(error) == "Page content export failed: Page too large"
        assert error.reason == "Page too large"
        assert error.error_code == "UPSTREAM_EXPORT_FAILED"
        assert error.details == {"reason": "Page too large", "doc_id": "doc-1", "page_id": "page-1"}

    def test_upstream_export_error_without_reason(self):
        error = UpstreamExportError("doc-1", "page-1")
        assert error.reason == "no reason reported"

    def test_export_timeout_error(self):
        error = ExportTimeoutError("doc-1", "page-1", 30.0)

        assert str(error) == "Page content export did not complete within 30 seconds"
        assert error.details["waited_seconds"] == 30.0
        assert error.error_code == "EXPORT_TIMEOUT"

    def test_result_missing_default_message(self):
        error = ExportResultMissingError("doc-1", "page-1")

        assert str(error) == "Unknown error has occurred"
        assert error.error_code == "EXPORT_RESULT_MISSING"

    @pytest.mark.parametrize(
        "error",
        [
            UpstreamExportError("d", "p", "r"),
            ExportTimeoutError("d", "p", 1.5),
            ExportResultMissingError("d", "p"),
        ],
    )
    def test_kinds_are_disjoint(self, error):
        kinds = (UpstreamExportError, ExportTimeoutError, ExportResultMissingError)
        assert sum(isinstance(error, kind) for kind in kinds) == 1
        assert not isinstance(error, TimeoutError)


class TestMutationErrors:
    def test_pipeline_step_error_keeps_cause(self):
        cause = CodaAPIError("Forbidden (403): No access", status_code=403)
        error = PipelineStepError("duplicate_page", "Creating duplicate page", cause)

        assert str(error) == "Creating duplicate page failed: Forbidden (403): No access"
        assert error.step == "Creating duplicate page"
        assert error.cause is cause
        assert error.details["cause_type"] == "CodaAPIError"

    def test_batch_timeout_error(self):
        error = BatchTimeoutError("Tasks", completed=2, total=5, timeout=1.5)

        assert str(error) == "Batch on Tasks timed out after 1.5 seconds (2/5 items applied)"
        assert error.details == {"resource": "Tasks", "completed": 2, "total": 5, "timeout": 1.5}
