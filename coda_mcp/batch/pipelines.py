"""Single-item page pipelines.

Each pipeline is a plain function over the client (and resolver, where it
reads content first). Read-then-apply pipelines never run the apply step when
the read step fails.
"""

import logging
from typing import Any

from ..exceptions import PipelineStepError

logger = logging.getLogger(__name__)


def canvas_content(content: str) -> dict[str, Any]:
    """Markdown canvas payload used when creating or updating page content."""
    return {"format": "markdown", "content": content}


async def duplicate_page(client, resolver, doc_id: str, page_id: str, new_name: str) -> dict[str, Any]:
    """Copy a page's content into a new page called ``new_name``.

    Raises:
        PipelineStepError: Naming the step that failed. If reading the source
            content fails no page is created.
    """
    try:
        content = await resolver.resolve_content(doc_id, page_id)
    except Exception as e:
        raise PipelineStepError("duplicate_page", "Fetching source page content", e) from e

    body = {
        "name": new_name,
        # The API rejects an empty canvas
        "pageContent": {"type": "canvas", "canvasContent": canvas_content(content or " ")},
    }
    try:
        created = await client.create_page(doc_id, body)
    except Exception as e:
        raise PipelineStepError("duplicate_page", "Creating duplicate page", e) from e
    logger.info("Duplicated page %s in %s as %r", page_id, doc_id, new_name)
    return created


async def rename_page(
    client, doc_id: str, page_id: str, new_name: str, subtitle: str | None = None
) -> dict[str, Any]:
    """Rename a page, optionally changing its subtitle."""
    body: dict[str, Any] = {"name": new_name}
    if subtitle is not None:
        body["subtitle"] = subtitle
    return await client.update_page(doc_id, page_id, body)


async def _update_content(client, doc_id: str, page_id: str, content: str, insertion_mode: str) -> dict[str, Any]:
    body = {
        "contentUpdate": {
            "insertionMode": insertion_mode,
            "canvasContent": canvas_content(content),
        }
    }
    return await client.update_page(doc_id, page_id, body)


async def replace_page_content(client, doc_id: str, page_id: str, content: str) -> dict[str, Any]:
    """Replace the whole canvas of a page with markdown ``content``."""
    return await _update_content(client, doc_id, page_id, content, "replace")


async def append_page_content(client, doc_id: str, page_id: str, content: str) -> dict[str, Any]:
    """Append markdown ``content`` to the end of a page."""
    return await _update_content(client, doc_id, page_id, content, "append")
