"""Metadata API client request shapes and failure mapping."""

from __future__ import annotations

import httpx
import pytest
from tenacity import wait_none

from moviefy.sources.http import SourceUnavailableError, fetch_json
from moviefy.sources.metadata import MetadataAPIClient
from moviefy.sources.observability import SourceMonitor
from moviefy.tests.utils import StubMetadataAPI, external_listing


@pytest.mark.asyncio
async def test_list_movies_sends_paging_and_sort() -> None:
    stub = StubMetadataAPI()
    stub.movies = [external_listing(1, "E1")]

    payload = await stub.client().list_movies(sort_by="title:asc", page=2, page_size=20)

    assert payload["movies"][0]["tmdb_id"] == 1
    params = stub.requests[0].url.params
    assert (params["sort_by"], params["page"], params["page_size"]) == ("title:asc", "2", "20")


@pytest.mark.asyncio
async def test_search_uses_trailing_slash_endpoint() -> None:
    stub = StubMetadataAPI()

    await stub.client().search("dune", page=1, page_size=10)

    assert stub.requests[0].url.path == "/api/search/"
    assert stub.requests[0].url.params["query"] == "dune"


@pytest.mark.asyncio
async def test_get_by_id_returns_none_for_missing_title() -> None:
    stub = StubMetadataAPI()
    monitor = SourceMonitor()

    assert await stub.client(monitor=monitor).get_by_id("404404") is None

    snapshot = await monitor.snapshot()
    assert snapshot["metadata_api"]["operations"]["get_by_id"]["failed"] == 0


@pytest.mark.asyncio
async def test_server_errors_raise_source_unavailable() -> None:
    stub = StubMetadataAPI()
    stub.status_code = 502
    monitor = SourceMonitor()

    with pytest.raises(SourceUnavailableError) as exc_info:
        await stub.client(monitor=monitor).list_tv_shows(sort_by="updated_on:desc", page=1, page_size=20)

    assert exc_info.value.status_code == 502
    snapshot = await monitor.snapshot()
    assert snapshot["metadata_api"]["operations"]["list_tv_shows"]["failed"] == 1


@pytest.mark.asyncio
async def test_malformed_json_raises_source_unavailable() -> None:
    client = MetadataAPIClient(
        "https://metadata.test",
        attempts=1,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="not json")),
        monitor=SourceMonitor(),
    )

    with pytest.raises(SourceUnavailableError):
        await client.get_by_id("1")


@pytest.mark.asyncio
async def test_fetch_json_retries_transient_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("moviefy.sources.http.wait_exponential_jitter", lambda **_: wait_none())
    responses = [httpx.Response(503), httpx.Response(200, json={"ok": True})]
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return responses.pop(0)

    payload = await fetch_json("https://metadata.test/api/movies", attempts=3, transport=httpx.MockTransport(handler))

    assert payload == {"ok": True}
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_fetch_json_does_not_retry_client_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("moviefy.sources.http.wait_exponential_jitter", lambda **_: wait_none())
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(400)

    with pytest.raises(SourceUnavailableError) as exc_info:
        await fetch_json("https://metadata.test/api/movies", attempts=3, transport=httpx.MockTransport(handler))

    assert exc_info.value.status_code == 400
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_fetch_json_wraps_network_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("moviefy.sources.http.wait_exponential_jitter", lambda **_: wait_none())

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(SourceUnavailableError):
        await fetch_json("https://metadata.test/api/movies", attempts=2, transport=httpx.MockTransport(handler))
