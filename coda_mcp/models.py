"""Pydantic models for the Coda MCP server.

Batch mutation models live in ``coda_mcp.batch.models``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import Field

# === Page Export Models ===


class ExportStatus(str, Enum):
    """Lifecycle states of a page export job, using the API's wire values."""

    IN_PROGRESS = "inProgress"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ExportStatus.IN_PROGRESS


class ExportJob(BaseModel):
    """Handle for an asynchronous page export on the Coda side."""

    doc_id: str
    page_id: str
    export_id: str
    status: ExportStatus = ExportStatus.IN_PROGRESS
    download_link: str | None = None
    error: str | None = None

    def advance(self, status_payload: dict[str, Any]) -> ExportJob:
        """Return the job updated with a status report from the API.

        Raises:
            ValueError: If the report is unreadable or moves a finished job backwards.
        """
        new_status = ExportStatus(status_payload.get("status"))
        if self.status.is_terminal and new_status != self.status:
            raise ValueError(f"Export {self.export_id} moved from {self.status.value} to {new_status.value}")
        return self.model_copy(
            update={
                "status": new_status,
                "download_link": status_payload.get("downloadLink") or self.download_link,
                "error": status_payload.get("error") or self.error,
            }
        )


# === Row Models ===


class RowUpdate(BaseModel):
    """New cell values for one row of a bulk update."""

    row_id_or_name: str = Field(..., description="The ID or name of the row to update")
    values: dict[str, Any] = Field(..., description="Column names or IDs mapped to their new values")


# === Listing Models ===


class ListParams(BaseModel):
    """Effective paging parameters for one list call."""

    limit: int | None = Field(default=None, description="Page size, only sent on a first page")
    page_token: str | None = Field(default=None, description="Continuation token from a previous page")
