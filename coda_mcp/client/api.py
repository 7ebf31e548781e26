"""Async client for the Coda REST API.

Each method maps onto one endpoint and returns the decoded JSON body. Non-2xx
answers raise ``CodaAPIError``; network failures raise ``TransportError``.
Retries are left to the caller.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from ..exceptions import CodaAPIError
from ..exceptions import TransportError

logger = logging.getLogger(__name__)


class ClientConfig(BaseModel):
    """Immutable connection settings for ``CodaClient``."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., min_length=1, repr=False)
    base_url: str = "https://coda.io/apis/v1"
    timeout: float = 30.0


def _q(segment: str) -> str:
    """Quote a path segment; page and table names may contain spaces or slashes."""
    return quote(segment, safe="")


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


class CodaClient:
    """Thin async wrapper around the Coda REST endpoints used by the tools."""

    def __init__(self, config: ClientConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    def _get_http(self) -> httpx.AsyncClient:
        """Get or create the HTTP client; a closed client is replaced."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._http

    @property
    def is_closed(self) -> bool:
        return self._http is None or self._http.is_closed

    async def aclose(self) -> None:
        """Close the connection pool. The next request opens a new one."""
        if self._http and not self._http.is_closed:
            await self._http.aclose()
        self._http = None

    async def __aenter__(self) -> CodaClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        params = _drop_none(params or {})
        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = await self._get_http().request(method, path, params=params or None, json=json)
        except httpx.HTTPError as e:
            raise TransportError(
                f"Request to Coda API failed: {e.__class__.__name__}: {e}", method=method, url=path
            ) from e

        if response.is_error:
            raise CodaAPIError(_error_message(response), status_code=response.status_code, method=method, url=path)
        if not response.content:
            return {}
        return response.json()

    # === Account ===

    async def whoami(self) -> dict[str, Any]:
        return await self._request("GET", "/whoami")

    async def resolve_browser_link(self, url: str) -> dict[str, Any]:
        return await self._request("GET", "/resolveBrowserLink", params={"url": url})

    # === Documents ===

    async def list_docs(
        self,
        query: str | None = None,
        limit: int | None = None,
        page_token: str | None = None,
        is_owner: bool | None = None,
        is_published: bool | None = None,
    ) -> dict[str, Any]:
        params = {
            "query": query,
            "limit": limit,
            "pageToken": page_token,
            "isOwner": is_owner,
            "isPublished": is_published,
        }
        return await self._request("GET", "/docs", params=params)

    async def get_doc(self, doc_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/docs/{_q(doc_id)}")

    async def create_doc(
        self, title: str, source_doc: str | None = None, folder_id: str | None = None
    ) -> dict[str, Any]:
        body = _drop_none({"title": title, "sourceDoc": source_doc, "folderId": folder_id})
        return await self._request("POST", "/docs", json=body)

    async def update_doc(
        self, doc_id: str, title: str | None = None, icon_name: str | None = None
    ) -> dict[str, Any]:
        body = _drop_none({"title": title, "iconName": icon_name})
        return await self._request("PATCH", f"/docs/{_q(doc_id)}", json=body)

    # === Pages ===

    async def list_pages(
        self, doc_id: str, limit: int | None = None, page_token: str | None = None
    ) -> dict[str, Any]:
        params = {"limit": limit, "pageToken": page_token}
        return await self._request("GET", f"/docs/{_q(doc_id)}/pages", params=params)

    async def create_page(self, doc_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/docs/{_q(doc_id)}/pages", json=body)

    async def update_page(self, doc_id: str, page_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/docs/{_q(doc_id)}/pages/{_q(page_id)}", json=body)

    async def delete_page(self, doc_id: str, page_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/docs/{_q(doc_id)}/pages/{_q(page_id)}")

    async def begin_page_export(self, doc_id: str, page_id: str, output_format: str = "markdown") -> dict[str, Any]:
        return await self._request(
            "POST", f"/docs/{_q(doc_id)}/pages/{_q(page_id)}/export", json={"outputFormat": output_format}
        )

    async def get_page_export_status(self, doc_id: str, page_id: str, export_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/docs/{_q(doc_id)}/pages/{_q(page_id)}/export/{_q(export_id)}")

    async def fetch_download(self, download_link: str) -> str:
        """Download an exported page.

        The link is pre-signed, so the API credential is not sent along.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, follow_redirects=True, transport=self._transport
            ) as http:
                response = await http.get(download_link)
        except httpx.HTTPError as e:
            raise TransportError(
                f"Download of exported page failed: {e.__class__.__name__}: {e}", method="GET"
            ) from e
        if response.is_error:
            raise CodaAPIError(
                f"Download of exported page failed with HTTP {response.status_code}",
                status_code=response.status_code,
                method="GET",
            )
        return response.text

    # === Tables and columns ===

    async def list_tables(
        self,
        doc_id: str,
        limit: int | None = None,
        page_token: str | None = None,
        table_types: list[str] | None = None,
    ) -> dict[str, Any]:
        params = {
            "limit": limit,
            "pageToken": page_token,
            "tableTypes": ",".join(table_types) if table_types else None,
        }
        return await self._request("GET", f"/docs/{_q(doc_id)}/tables", params=params)

    async def get_table(self, doc_id: str, table_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/docs/{_q(doc_id)}/tables/{_q(table_id)}")

    async def list_columns(
        self,
        doc_id: str,
        table_id: str,
        limit: int | None = None,
        page_token: str | None = None,
        visible_only: bool | None = None,
    ) -> dict[str, Any]:
        params = {"limit": limit, "pageToken": page_token, "visibleOnly": visible_only}
        return await self._request("GET", f"/docs/{_q(doc_id)}/tables/{_q(table_id)}/columns", params=params)

    async def get_column(self, doc_id: str, table_id: str, column_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/docs/{_q(doc_id)}/tables/{_q(table_id)}/columns/{_q(column_id)}")

    # === Rows ===

    async def list_rows(
        self,
        doc_id: str,
        table_id: str,
        query: str | None = None,
        limit: int | None = None,
        page_token: str | None = None,
        sort_by: str | None = None,
        use_column_names: bool | None = None,
        visible_only: bool | None = None,
    ) -> dict[str, Any]:
        params = {
            "query": query,
            "limit": limit,
            "pageToken": page_token,
            "sortBy": sort_by,
            "useColumnNames": use_column_names,
            "visibleOnly": visible_only,
        }
        return await self._request("GET", f"/docs/{_q(doc_id)}/tables/{_q(table_id)}/rows", params=params)

    async def get_row(
        self, doc_id: str, table_id: str, row_id: str, use_column_names: bool | None = None
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/docs/{_q(doc_id)}/tables/{_q(table_id)}/rows/{_q(row_id)}",
            params={"useColumnNames": use_column_names},
        )

    async def upsert_rows(
        self,
        doc_id: str,
        table_id: str,
        rows: list[dict[str, Any]],
        key_columns: list[str] | None = None,
    ) -> dict[str, Any]:
        body = _drop_none({"rows": rows, "keyColumns": key_columns})
        return await self._request("POST", f"/docs/{_q(doc_id)}/tables/{_q(table_id)}/rows", json=body)

    async def update_row(
        self, doc_id: str, table_id: str, row_id: str, cells: list[dict[str, Any]]
    ) -> dict[str, Any]:
        return await self._request(
            "PUT", f"/docs/{_q(doc_id)}/tables/{_q(table_id)}/rows/{_q(row_id)}", json={"row": {"cells": cells}}
        )

    async def delete_row(self, doc_id: str, table_id: str, row_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/docs/{_q(doc_id)}/tables/{_q(table_id)}/rows/{_q(row_id)}")

    async def delete_rows(self, doc_id: str, table_id: str, row_ids: list[str]) -> dict[str, Any]:
        return await self._request("DELETE", f"/docs/{_q(doc_id)}/tables/{_q(table_id)}/rows", json={"rowIds": row_ids})

    async def push_button(self, doc_id: str, table_id: str, row_id: str, column_id: str) -> dict[str, Any]:
        return await self._request(
            "POST", f"/docs/{_q(doc_id)}/tables/{_q(table_id)}/rows/{_q(row_id)}/buttons/{_q(column_id)}"
        )

    # === Formulas and controls ===

    async def list_formulas(
        self,
        doc_id: str,
        limit: int | None = None,
        page_token: str | None = None,
        sort_by: str | None = None,
    ) -> dict[str, Any]:
        params = {"limit": limit, "pageToken": page_token, "sortBy": sort_by}
        return await self._request("GET", f"/docs/{_q(doc_id)}/formulas", params=params)

    async def get_formula(self, doc_id: str, formula_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/docs/{_q(doc_id)}/formulas/{_q(formula_id)}")

    async def list_controls(
        self,
        doc_id: str,
        limit: int | None = None,
        page_token: str | None = None,
        sort_by: str | None = None,
    ) -> dict[str, Any]:
        params = {"limit": limit, "pageToken": page_token, "sortBy": sort_by}
        return await self._request("GET", f"/docs/{_q(doc_id)}/controls", params=params)

    async def get_control(self, doc_id: str, control_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/docs/{_q(doc_id)}/controls/{_q(control_id)}")


def _error_message(response: httpx.Response) -> str:
    """Extract the API's own error message, falling back to the status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return f"{body.get('statusMessage') or response.reason_phrase} ({response.status_code}): {body['message']}"
    return f"Coda API returned HTTP {response.status_code} {response.reason_phrase}".rstrip()
