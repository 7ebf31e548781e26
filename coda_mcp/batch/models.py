"""Batch mutation models.

A batch applies an ordered list of items against one resource. Partial
failure is not an error: each item gets its own outcome and the report's
counts are always derived from those outcomes.
"""

from typing import Any

from pydantic import BaseModel
from pydantic import Field
from pydantic import computed_field


class BatchItem(BaseModel):
    """A single mutation within a batch."""

    target_id: str = Field(..., description="Identifier of the item being mutated (e.g. a row ID)")
    payload: dict[str, Any] = Field(default_factory=dict, description="Mutation parameters")


class BatchOutcome(BaseModel):
    """Result of applying one ``BatchItem``."""

    target_id: str = Field(..., description="Identifier of the mutated item")
    success: bool = Field(..., description="Whether the mutation succeeded")
    data: Any = Field(default=None, description="API response for a successful mutation")
    error: str | None = Field(default=None, description="Error message if failed")
    execution_time_ms: float = Field(default=0.0, description="Execution time in milliseconds")


class BatchReport(BaseModel):
    """Aggregate result of a batch, one outcome per item in input order."""

    resource: str = Field(..., description="Resource the batch was applied to")
    results: list[BatchOutcome] = Field(default_factory=list, description="Per-item outcomes")
    execution_time_ms: float = Field(default=0.0, description="Total execution time")

    @computed_field
    @property
    def total_count(self) -> int:
        return len(self.results)

    @computed_field
    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.results if outcome.success)

    @computed_field
    @property
    def failure_count(self) -> int:
        return self.total_count - self.success_count

    @computed_field
    @property
    def summary(self) -> str:
        return f"Applied {self.success_count}/{self.total_count} updates successfully"
