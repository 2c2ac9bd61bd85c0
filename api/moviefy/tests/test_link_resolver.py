"""Best-effort shortening of outbound links."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from moviefy.pipeline.link_resolver import LinkResolver, ShortenerConfig
from moviefy.sources.observability import SourceMonitor

ACTIVE = ShortenerConfig(enabled=True, endpoint="https://short.test/api", api_key="secret-key")


def _resolver(handler, config: ShortenerConfig = ACTIVE) -> LinkResolver:
    return LinkResolver(config, transport=httpx.MockTransport(handler), monitor=SourceMonitor())


def _shortening_handler(calls: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        target = request.url.params["url"]
        return httpx.Response(200, json={"status": "success", "shortenedUrl": f"https://sho.rt/{len(target)}"})

    return handler


@pytest.mark.asyncio
async def test_resolve_returns_shortened_url() -> None:
    calls: list[httpx.Request] = []
    resolver = _resolver(_shortening_handler(calls))

    result = await resolver.resolve("https://example.com/x")

    assert result == "https://sho.rt/21"
    assert calls[0].url.params["api"] == "secret-key"
    assert calls[0].url.params["url"] == "https://example.com/x"


@pytest.mark.asyncio
async def test_resolve_falls_back_on_provider_error() -> None:
    resolver = _resolver(lambda request: httpx.Response(500, json={"status": "error"}))

    assert await resolver.resolve("https://example.com/x") == "https://example.com/x"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"status": "error", "message": "bad key"}),
        httpx.Response(200, json={"status": "success", "shortenedUrl": ""}),
        httpx.Response(200, json={"status": "success"}),
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(200, json=["https://sho.rt/list"]),
    ],
)
async def test_resolve_falls_back_on_unusable_response(response: httpx.Response) -> None:
    resolver = _resolver(lambda request: response)

    assert await resolver.resolve("https://example.com/x") == "https://example.com/x"


@pytest.mark.asyncio
async def test_resolve_falls_back_on_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    resolver = _resolver(handler)

    assert await resolver.resolve("https://example.com/x") == "https://example.com/x"


@pytest.mark.asyncio
async def test_disabled_shortener_never_calls_provider() -> None:
    calls: list[httpx.Request] = []
    config = ShortenerConfig(enabled=False, endpoint="https://short.test/api", api_key="secret-key")
    resolver = _resolver(_shortening_handler(calls), config)

    assert await resolver.resolve("https://example.com/x") == "https://example.com/x"
    assert await resolver.resolve_many(["https://example.com/a", "https://example.com/b"]) == [
        "https://example.com/a",
        "https://example.com/b",
    ]
    assert calls == []


@pytest.mark.asyncio
async def test_missing_key_disables_shortener() -> None:
    calls: list[httpx.Request] = []
    config = ShortenerConfig(enabled=True, endpoint="https://short.test/api", api_key="  ")
    resolver = _resolver(_shortening_handler(calls), config)

    assert await resolver.resolve("https://example.com/x") == "https://example.com/x"
    assert calls == []


@pytest.mark.asyncio
async def test_non_http_values_pass_through() -> None:
    calls: list[httpx.Request] = []
    resolver = _resolver(_shortening_handler(calls))

    assert await resolver.resolve("/local/relative/path") == "/local/relative/path"
    assert await resolver.resolve("") == ""
    assert calls == []


@pytest.mark.asyncio
async def test_bare_telegram_links_get_a_scheme() -> None:
    config = ShortenerConfig(enabled=False)
    resolver = _resolver(lambda request: httpx.Response(500), config)

    assert await resolver.resolve("t.me/SomeBot?start=file_1") == "https://t.me/SomeBot?start=file_1"


@pytest.mark.asyncio
async def test_resolve_many_keeps_positions_when_responses_arrive_out_of_order() -> None:
    delays = {"https://example.com/slow": 0.05, "https://example.com/medium": 0.02}

    async def handler(request: httpx.Request) -> httpx.Response:
        target = request.url.params["url"]
        await asyncio.sleep(delays.get(target, 0))
        return httpx.Response(200, json={"status": "success", "shortenedUrl": f"https://sho.rt/{target[20:]}"})

    resolver = _resolver(handler)

    resolved = await resolver.resolve_many(
        ["https://example.com/slow", "/relative", "https://example.com/medium", "https://example.com/fast"]
    )

    assert resolved == ["https://sho.rt/slow", "/relative", "https://sho.rt/medium", "https://sho.rt/fast"]


@pytest.mark.asyncio
async def test_failing_provider_is_called_on_every_resolve() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(502)

    monitor = SourceMonitor(circuit_threshold=2)
    resolver = LinkResolver(ACTIVE, transport=httpx.MockTransport(handler), monitor=monitor)

    for _ in range(3):
        assert await resolver.resolve("https://example.com/x") == "https://example.com/x"

    assert len(calls) == 3
    snapshot = await monitor.snapshot()
    assert snapshot["url_shortener"]["operations"]["shorten"]["failed"] == 3
    assert snapshot["url_shortener"]["circuit"]["opened_count"] == 1


def test_config_from_settings_document() -> None:
    config = ShortenerConfig.from_document(
        {"enable_url_shortener": True, "url_shortener_api_url": "https://s.test/api", "url_shortener_api_key": "k"}
    )

    assert config.is_active
    assert not ShortenerConfig.from_document({"enable_url_shortener": "yes"}).is_active
    assert not ShortenerConfig.from_document(None).is_active
