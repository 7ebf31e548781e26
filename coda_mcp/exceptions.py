"""Custom exception hierarchy for the Coda MCP server.

Every error raised by this package derives from ``CodaMCPError`` so that the
tool layer can turn it into a single human-readable message. Errors carry a
machine-readable ``error_code`` and a ``details`` dict for structured logging.
"""

from __future__ import annotations

from typing import Any


class CodaMCPError(Exception):
    """Base exception for all Coda MCP errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.user_message = user_message or message

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception into a dictionary for logging and responses."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
        }


class ConfigurationError(CodaMCPError):
    """Raised when the server is started with missing or invalid configuration."""

    def __init__(self, message: str, setting: str | None = None, **kwargs):
        details = kwargs.pop("details", {})
        if setting:
            details["setting"] = setting
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details, **kwargs)


class ValidationError(CodaMCPError):
    """Raised when caller input is malformed."""

    def __init__(self, message: str, field: str | None = None, value: Any = None, **kwargs):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["invalid_value"] = value
        super().__init__(message, error_code="VALIDATION_ERROR", details=details, **kwargs)


# === Transport ===


class TransportError(CodaMCPError):
    """Raised when a request to the Coda API could not be completed."""

    def __init__(self, message: str, method: str | None = None, url: str | None = None, **kwargs):
        details = kwargs.pop("details", {})
        if method:
            details["method"] = method
        if url:
            details["url"] = url
        error_code = kwargs.pop("error_code", "TRANSPORT_ERROR")
        super().__init__(message, error_code=error_code, details=details, **kwargs)


class CodaAPIError(TransportError):
    """Raised when the Coda API answers with a non-success status code."""

    def __init__(self, message: str, status_code: int, **kwargs):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        super().__init__(message, error_code="CODA_API_ERROR", details=details, **kwargs)
        self.status_code = status_code


# === Content retrieval ===


class RetrievalError(CodaMCPError):
    """Base class for failures while resolving page content through an export job."""

    def __init__(self, message: str, doc_id: str, page_id: str, **kwargs):
        details = kwargs.pop("details", {})
        details.update({"doc_id": doc_id, "page_id": page_id})
        error_code = kwargs.pop("error_code", "RETRIEVAL_ERROR")
        super().__init__(message, error_code=error_code, details=details, **kwargs)


class UpstreamExportError(RetrievalError):
    """Raised when the export job reports that it failed."""

    def __init__(self, doc_id: str, page_id: str, reason: str | None = None, **kwargs):
        reason = reason or "no reason reported"
        super().__init__(
            f"Page content export failed: {reason}",
            doc_id,
            page_id,
            error_code="UPSTREAM_EXPORT_FAILED",
            details={"reason": reason},
            **kwargs,
        )
        self.reason = reason


class ExportTimeoutError(RetrievalError):
    """Raised when the export job does not reach a terminal state in time."""

    def __init__(self, doc_id: str, page_id: str, waited: float, **kwargs):
        super().__init__(
            f"Page content export did not complete within {waited:g} seconds",
            doc_id,
            page_id,
            error_code="EXPORT_TIMEOUT",
            details={"waited_seconds": waited},
            **kwargs,
        )


class ExportResultMissingError(RetrievalError):
    """Raised when the export job yields neither content nor an error."""

    def __init__(self, doc_id: str, page_id: str, reason: str = "Unknown error has occurred", **kwargs):
        super().__init__(reason, doc_id, page_id, error_code="EXPORT_RESULT_MISSING", **kwargs)


# === Mutations ===


class PipelineStepError(CodaMCPError):
    """Raised when a named step of a single-item page pipeline fails."""

    def __init__(self, pipeline: str, step: str, cause: Exception, **kwargs):
        super().__init__(
            f"{step} failed: {cause}",
            error_code="PIPELINE_STEP_FAILED",
            details={"pipeline": pipeline, "step": step, "cause_type": type(cause).__name__},
            **kwargs,
        )
        self.pipeline = pipeline
        self.step = step
        self.cause = cause


class BatchTimeoutError(CodaMCPError):
    """Raised when a batch does not finish before its deadline."""

    def __init__(self, resource: str, completed: int, total: int, timeout: float, **kwargs):
        super().__init__(
            f"Batch on {resource} timed out after {timeout:g} seconds ({completed}/{total} items applied)",
            error_code="BATCH_TIMEOUT",
            details={"resource": resource, "completed": completed, "total": total, "timeout": timeout},
            **kwargs,
        )
