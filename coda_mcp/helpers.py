"""Centralized helper functions for the Coda MCP system.

Shared by the tool modules: paging parameter precedence, line handling for
page previews, row cell conversion and JSON rendering of API payloads.
"""

import json
import re
from typing import Any

from .models import ListParams

# Bare and carriage-return-prefixed line breaks
_LINE_BREAK = re.compile(r"\r?\n")


# --- Pagination ---


def resolve_list_params(limit: int | None = None, page_token: str | None = None) -> ListParams:
    """Decide the effective page size and cursor for one list call.

    A continuation token wins over ``limit``: the API fixes the page size on the
    request that issued the token, so the limit is dropped on follow-up pages.
    """
    if page_token:
        return ListParams(limit=None, page_token=page_token)
    return ListParams(limit=limit, page_token=None)


# --- Line Handling ---


def split_lines(content: str) -> list[str]:
    """Split text on ``\\n`` and ``\\r\\n`` line breaks."""
    return _LINE_BREAK.split(content)


def take_lines(content: str, max_lines: int) -> str:
    """Return the first ``max_lines`` lines of ``content`` joined with ``\\n``."""
    return "\n".join(split_lines(content)[:max_lines])


# --- Row Cells ---


def values_to_cells(values: dict[str, Any]) -> list[dict[str, Any]]:
    """Convert a ``{column: value}`` mapping into the API's cell list."""
    return [{"column": column, "value": value} for column, value in values.items()]


# --- Rendering ---


def to_json_text(data: Any) -> str:
    """Render an API payload as indented JSON text."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def matches_name(item: dict[str, Any], query: str) -> bool:
    """Case-insensitive substring match on an item's ``name``."""
    return query.lower() in str(item.get("name") or "").lower()
