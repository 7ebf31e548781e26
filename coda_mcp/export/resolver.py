"""Export-poll resolver: page text from an asynchronous export job."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..exceptions import ExportResultMissingError
from ..exceptions import ExportTimeoutError
from ..exceptions import UpstreamExportError
from ..helpers import take_lines
from ..models import ExportJob
from ..models import ExportStatus

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMAT = "markdown"


class ExportPollResolver:
    """Drive page export jobs to completion and return their text.

    Each call owns its own ``ExportJob``; concurrent calls for different pages
    share nothing but the client.
    """

    def __init__(
        self,
        client,
        poll_interval: float = 0.5,
        max_wait: float = 30.0,
        output_format: str = DEFAULT_OUTPUT_FORMAT,
    ):
        if poll_interval <= 0 or max_wait <= 0:
            raise ValueError("poll_interval and max_wait must be positive")
        self.client = client
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.output_format = output_format

    @classmethod
    def from_settings(cls, client, settings) -> ExportPollResolver:
        return cls(
            client,
            poll_interval=settings.export_poll_interval,
            max_wait=settings.export_max_wait,
        )

    async def resolve_content(self, doc_id: str, page_id: str) -> str:
        """Export a page and return its full text.

        The empty string is a valid result.

        Raises:
            UpstreamExportError: The export job reported failure.
            ExportTimeoutError: The job did not finish within ``max_wait``.
            ExportResultMissingError: The API returned no usable job or content.
            TransportError: Propagated unchanged from the client.
        """
        job = await self._submit(doc_id, page_id)
        job = await self._wait_until_finished(job)

        if job.status is ExportStatus.FAILED:
            raise UpstreamExportError(doc_id, page_id, job.error)
        if not job.download_link:
            raise ExportResultMissingError(doc_id, page_id)

        content = await self.client.fetch_download(job.download_link)
        if content is None:
            raise ExportResultMissingError(doc_id, page_id)
        logger.debug("Export %s of %s/%s returned %d characters", job.export_id, doc_id, page_id, len(content))
        return content

    async def peek_content(self, doc_id: str, page_id: str, max_lines: int) -> str:
        """Return the first ``max_lines`` lines of a page, joined with ``\\n``."""
        if max_lines <= 0:
            raise ValueError("max_lines must be a positive integer")
        content = await self.resolve_content(doc_id, page_id)
        return take_lines(content, max_lines)

    async def _submit(self, doc_id: str, page_id: str) -> ExportJob:
        payload = await self.client.begin_page_export(doc_id, page_id, self.output_format)
        if not isinstance(payload, dict) or not payload.get("id"):
            raise ExportResultMissingError(doc_id, page_id)
        try:
            job = ExportJob(
                doc_id=doc_id,
                page_id=page_id,
                export_id=payload["id"],
                status=ExportStatus(payload.get("status") or ExportStatus.IN_PROGRESS.value),
                download_link=payload.get("downloadLink"),
                error=payload.get("error"),
            )
        except ValueError as e:
            raise ExportResultMissingError(doc_id, page_id, reason=f"Unrecognized export job: {e}") from e
        logger.debug("Submitted export %s for %s/%s", job.export_id, doc_id, page_id)
        return job

    async def _wait_until_finished(self, job: ExportJob) -> ExportJob:
        try:
            async with asyncio.timeout(self.max_wait) as deadline:
                while not job.status.is_terminal:
                    await asyncio.sleep(self.poll_interval)
                    payload = await self.client.get_page_export_status(job.doc_id, job.page_id, job.export_id)
                    job = self._advance(job, payload)
        except TimeoutError as e:
            if not deadline.expired():
                raise
            raise ExportTimeoutError(job.doc_id, job.page_id, self.max_wait) from e
        return job

    @staticmethod
    def _advance(job: ExportJob, payload: Any) -> ExportJob:
        if not isinstance(payload, dict):
            raise ExportResultMissingError(job.doc_id, job.page_id)
        try:
            return job.advance(payload)
        except ValueError as e:
            raise ExportResultMissingError(job.doc_id, job.page_id, reason=f"Unrecognized export status: {e}") from e
