"""Sequential batch executor for Coda mutations.

Items are applied strictly in input order. A failing item is recorded and the
loop moves on; earlier successes are never rolled back because the API has no
multi-item atomicity.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Iterable
from typing import Any

from ..exceptions import BatchTimeoutError
from .models import BatchItem
from .models import BatchOutcome
from .models import BatchReport

logger = logging.getLogger(__name__)

MutateFunc = Callable[[str, BatchItem], Awaitable[Any]]


class BatchExecutor:
    """Apply batches of mutations, isolating per-item failures."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    async def apply_batch(
        self,
        resource_ref: str,
        items: Iterable[BatchItem],
        mutate: MutateFunc,
        timeout: float | None = None,
    ) -> BatchReport:
        """Apply ``mutate`` to every item and report each outcome.

        Args:
            resource_ref: Resource the items belong to, passed through to ``mutate``
            items: Items to apply, in order
            mutate: Async callable ``(resource_ref, item) -> data``
            timeout: Overall deadline in seconds; falls back to the executor default

        Returns:
            BatchReport: One outcome per item, in input order

        Raises:
            BatchTimeoutError: If the deadline is reached before all items are applied.
        """
        items = list(items)
        timeout = timeout if timeout is not None else self.timeout
        start_time = time.time()
        results: list[BatchOutcome] = []

        try:
            async with asyncio.timeout(timeout) as deadline:
                for item in items:
                    results.append(await self._apply_item(resource_ref, item, mutate))
        except TimeoutError as e:
            if not deadline.expired():
                raise
            logger.warning("Batch on %s timed out after %d/%d items", resource_ref, len(results), len(items))
            raise BatchTimeoutError(resource_ref, len(results), len(items), timeout) from e

        report = BatchReport(
            resource=resource_ref,
            results=results,
            execution_time_ms=(time.time() - start_time) * 1000,
        )
        logger.info("Batch on %s: %s", resource_ref, report.summary)
        return report

    async def _apply_item(self, resource_ref: str, item: BatchItem, mutate: MutateFunc) -> BatchOutcome:
        item_start = time.time()
        try:
            data = await mutate(resource_ref, item)
        except Exception as e:
            logger.info("Batch item %s on %s failed: %s", item.target_id, resource_ref, e)
            return BatchOutcome(
                target_id=item.target_id,
                success=False,
                error=str(e) or e.__class__.__name__,
                execution_time_ms=(time.time() - item_start) * 1000,
            )
        return BatchOutcome(
            target_id=item.target_id,
            success=True,
            data=data,
            execution_time_ms=(time.time() - item_start) * 1000,
        )
