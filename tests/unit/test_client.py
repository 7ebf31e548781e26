"""Unit tests for the Coda API client using an in-memory HTTP transport."""

import json

import httpx
import pytest

from coda_mcp.client import ClientConfig
from coda_mcp.client import CodaClient
from coda_mcp.exceptions import CodaAPIError
from coda_mcp.exceptions import TransportError


class Recorder:
    """MockTransport handler that records requests and replies from a script."""

    def __init__(self, *responses):
        self.requests: list[httpx.Request] = []
        self.responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if self.responses else httpx.Response(200, json={})
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_client(handler) -> CodaClient:
    config = ClientConfig(api_key="secret-token", base_url="https://coda.test/apis/v1", timeout=5)
    return CodaClient(config, transport=httpx.MockTransport(handler))


class TestClientConfig:
    def test_is_immutable(self):
        config = ClientConfig(api_key="k")
        with pytest.raises(Exception):
            config.api_key = "other"

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            ClientConfig(api_key="")

    def test_api_key_not_in_repr(self):
        assert "secret" not in repr(ClientConfig(api_key="secret"))


class TestRequests:
    """Requests are built with the right method, path, query and body."""

    @pytest.mark.asyncio
    async def test_bearer_auth_and_json(self):
        recorder = Recorder(httpx.Response(200, json={"name": "Ada"}))
        async with make_client(recorder) as client:
            result = await client.whoami()

        assert result == {"name": "Ada"}
        assert recorder.last.headers["Authorization"] == "Bearer secret-token"
        assert recorder.last.url.path == "/apis/v1/whoami"

    @pytest.mark.asyncio
    async def test_list_pages_omits_unset_params(self):
        recorder = Recorder()
        async with make_client(recorder) as client:
            await client.list_pages("doc-1", limit=None, page_token="tok")

        assert recorder.last.url.path == "/apis/v1/docs/doc-1/pages"
        assert dict(recorder.last.url.params) == {"pageToken": "tok"}

    @pytest.mark.asyncio
    async def test_page_names_are_quoted(self):
        recorder = Recorder()
        async with make_client(recorder) as client:
            await client.delete_page("doc-1", "Notes/2024 Q1")

        assert recorder.last.method == "DELETE"
        assert recorder.last.url.raw_path == b"/apis/v1/docs/doc-1/pages/Notes%2F2024%20Q1"

    @pytest.mark.asyncio
    async def test_begin_export_body(self):
        recorder = Recorder(httpx.Response(202, json={"id": "e1", "status": "inProgress"}))
        async with make_client(recorder) as client:
            result = await client.begin_page_export("doc-1", "page-1")

        assert result["id"] == "e1"
        assert recorder.last.method == "POST"
        assert recorder.last.url.path == "/apis/v1/docs/doc-1/pages/page-1/export"
        assert json.loads(recorder.last.content) == {"outputFormat": "markdown"}

    @pytest.mark.asyncio
    async def test_export_status_path(self):
        recorder = Recorder(httpx.Response(200, json={"status": "complete", "downloadLink": "https://dl"}))
        async with make_client(recorder) as client:
            await client.get_page_export_status("doc-1", "page-1", "e1")

        assert recorder.last.url.path == "/apis/v1/docs/doc-1/pages/page-1/export/e1"

    @pytest.mark.asyncio
    async def test_update_row_wraps_cells(self):
        recorder = Recorder()
        cells = [{"column": "Status", "value": "Done"}]
        async with make_client(recorder) as client:
            await client.update_row("doc-1", "Tasks", "row-1", cells)

        assert recorder.last.method == "PUT"
        assert json.loads(recorder.last.content) == {"row": {"cells": cells}}

    @pytest.mark.asyncio
    async def test_delete_rows_body(self):
        recorder = Recorder()
        async with make_client(recorder) as client:
            await client.delete_rows("doc-1", "Tasks", ["r1", "r2"])

        assert recorder.last.method == "DELETE"
        assert json.loads(recorder.last.content) == {"rowIds": ["r1", "r2"]}

    @pytest.mark.asyncio
    async def test_list_tables_joins_types(self):
        recorder = Recorder()
        async with make_client(recorder) as client:
            await client.list_tables("doc-1", table_types=["table", "view"])

        assert recorder.last.url.params["tableTypes"] == "table,view"

    @pytest.mark.asyncio
    async def test_boolean_params(self):
        recorder = Recorder()
        async with make_client(recorder) as client:
            await client.list_docs(is_owner=True)

        assert recorder.last.url.params["isOwner"] == "true"

    @pytest.mark.asyncio
    async def test_resolve_browser_link_query(self):
        recorder = Recorder()
        async with make_client(recorder) as client:
            await client.resolve_browser_link("https://coda.io/d/doc_dabc")

        assert recorder.last.url.path == "/apis/v1/resolveBrowserLink"
        assert recorder.last.url.params["url"] == "https://coda.io/d/doc_dabc"

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_dict(self):
        recorder = Recorder(httpx.Response(204))
        async with make_client(recorder) as client:
            assert await client.delete_row("doc-1", "Tasks", "row-1") == {}


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_requests_after_close_open_a_new_pool(self):
        recorder = Recorder(httpx.Response(200, json={"n": 1}), httpx.Response(200, json={"n": 2}))
        client = make_client(recorder)

        assert await client.whoami() == {"n": 1}
        await client.aclose()
        assert client.is_closed

        assert await client.whoami() == {"n": 2}
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        client = make_client(Recorder())
        await client.aclose()
        await client.aclose()
        assert client.is_closed


class TestDownloads:
    @pytest.mark.asyncio
    async def test_download_skips_api_credential(self):
        recorder = Recorder(httpx.Response(200, text="# Page"))
        async with make_client(recorder) as client:
            content = await client.fetch_download("https://storage.test/export.md")

        assert content == "# Page"
        assert "Authorization" not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_download_of_empty_page(self):
        recorder = Recorder(httpx.Response(200, text=""))
        async with make_client(recorder) as client:
            assert await client.fetch_download("https://storage.test/export.md") == ""

    @pytest.mark.asyncio
    async def test_download_http_error(self):
        recorder = Recorder(httpx.Response(410))
        async with make_client(recorder) as client:
            with pytest.raises(CodaAPIError) as exc_info:
                await client.fetch_download("https://storage.test/export.md")

        assert exc_info.value.status_code == 410


class TestErrors:
    @pytest.mark.asyncio
    async def test_api_error_message(self):
        recorder = Recorder(
            httpx.Response(404, json={"statusCode": 404, "statusMessage": "Not Found", "message": "Page not found"})
        )
        async with make_client(recorder) as client:
            with pytest.raises(CodaAPIError) as exc_info:
                await client.get_doc("doc-1")

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Not Found (404): Page not found"
        assert isinstance(exc_info.value, TransportError)

    @pytest.mark.asyncio
    async def test_api_error_without_body(self):
        recorder = Recorder(httpx.Response(500))
        async with make_client(recorder) as client:
            with pytest.raises(CodaAPIError, match="HTTP 500"):
                await client.get_doc("doc-1")

    @pytest.mark.asyncio
    async def test_network_failure(self):
        recorder = Recorder(httpx.ConnectError("connection refused"))
        async with make_client(recorder) as client:
            with pytest.raises(TransportError, match="ConnectError"):
                await client.whoami()
