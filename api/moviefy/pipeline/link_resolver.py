"""Best-effort URL shortening for outbound download links.

Invariants:
- ``resolve`` never raises and never returns an empty string for a
  non-empty input; every failure degrades to the unshortened URL.
- Values that are not http(s) URLs (relative paths, blanks) pass through
  untouched.
- No retries: the shortener is an enhancement, not a dependency.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import httpx

from moviefy.core.config import settings
from moviefy.sources.http import SourceUnavailableError
from moviefy.sources.observability import SourceMonitor, source_monitor
from moviefy.utils.redaction import redact_secrets

logger = logging.getLogger("moviefy.pipeline.link_resolver")


@dataclass(frozen=True, slots=True)
class ShortenerConfig:
    """Snapshot of the shortener settings taken once per request."""
    enabled: bool = False
    endpoint: str | None = None
    api_key: str | None = None

    @property
    def is_active(self) -> bool:
        return bool(self.enabled and (self.endpoint or "").strip() and (self.api_key or "").strip())

    @classmethod
    def from_document(cls, data: Mapping[str, Any] | None) -> "ShortenerConfig":
        data = data or {}
        endpoint = data.get("url_shortener_api_url")
        api_key = data.get("url_shortener_api_key")
        return cls(
            enabled=data.get("enable_url_shortener") is True,
            endpoint=endpoint if isinstance(endpoint, str) else None,
            api_key=api_key if isinstance(api_key, str) else None,
        )


def _with_scheme(url: str) -> str | None:
    """Return the http(s) form of ``url`` or None when it is not a web URL."""
    candidate = url.strip()
    if candidate.startswith("t.me/"):
        candidate = f"https://{candidate}"
    if candidate.startswith("http://") or candidate.startswith("https://"):
        return candidate
    return None


async def _unchanged(url: str) -> str:
    return url


def _provider_endpoint(endpoint: str) -> str:
    endpoint = endpoint.strip()
    if endpoint.endswith("/") and not endpoint.endswith("/api/"):
        return endpoint[:-1]
    return endpoint


class LinkResolver:
    """Rewrite links through a ``GET {endpoint}?api={key}&url={url}`` shortener."""
    source_name = "url_shortener"

    def __init__(
        self,
        config: ShortenerConfig,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        monitor: SourceMonitor | None = None,
    ) -> None:
        self.config = config
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport
        self._monitor = monitor or source_monitor

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def resolve(self, url: str) -> str:
        candidate = self._candidate(url)
        if candidate is None or not self.config.is_active:
            return candidate or url
        async with self._client() as client:
            return await self._shorten_or_fallback(candidate, client)

    async def resolve_many(self, urls: Sequence[str]) -> list[str]:
        """Resolve concurrently; result ``i`` always corresponds to ``urls[i]``."""
        candidates = [self._candidate(url) for url in urls]
        if not self.config.is_active or all(candidate is None for candidate in candidates):
            return [candidate or url for candidate, url in zip(candidates, urls)]
        async with self._client() as client:
            resolved = await asyncio.gather(
                *(
                    self._shorten_or_fallback(candidate, client) if candidate else _unchanged(url)
                    for candidate, url in zip(candidates, urls)
                )
            )
        return list(resolved)

    @staticmethod
    def _candidate(url: str) -> str | None:
        if not isinstance(url, str) or not url.strip():
            return None
        return _with_scheme(url)

    async def _shorten_or_fallback(self, candidate: str, client: httpx.AsyncClient) -> str:
        try:
            return await self._monitor.track(
                self.source_name,
                "shorten",
                lambda: self._shorten(candidate, client),
                context={"url": candidate},
            )
        except Exception as exc:  # noqa: BLE001
            logger.info("Shortener fallback for %s: %s", candidate, redact_secrets(str(exc)))
            return candidate

    async def _shorten(self, url: str, client: httpx.AsyncClient) -> str:
        try:
            response = await client.get(
                _provider_endpoint(self.config.endpoint or ""),
                params={"api": (self.config.api_key or "").strip(), "url": url},
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(f"{type(exc).__name__}: {exc}") from exc
        if not response.is_success:
            raise SourceUnavailableError(
                f"Shortener error {response.status_code}", status_code=response.status_code
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise SourceUnavailableError("Shortener response is not valid JSON") from exc
        if not isinstance(data, dict) or data.get("status") != "success":
            raise SourceUnavailableError("Shortener did not report success")
        shortened = data.get("shortenedUrl")
        if not isinstance(shortened, str) or not shortened.startswith("http"):
            raise SourceUnavailableError("Shortener returned no usable shortenedUrl")
        return shortened
