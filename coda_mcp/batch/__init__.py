"""Best-effort batch mutations for Coda resources.

Key Components:
- BatchExecutor: sequential, order-preserving execution with per-item failure isolation
- Page pipelines: duplicate, rename and content updates as single-item flows
- Data models for batch items, outcomes and reports
"""

from .executor import BatchExecutor
from .models import BatchItem
from .models import BatchOutcome
from .models import BatchReport
from .pipelines import append_page_content
from .pipelines import duplicate_page
from .pipelines import rename_page
from .pipelines import replace_page_content

__all__ = [
    # Models
    "BatchItem",
    "BatchOutcome",
    "BatchReport",
    # Core Components
    "BatchExecutor",
    # Pipelines
    "duplicate_page",
    "rename_page",
    "replace_page_content",
    "append_page_content",
]
