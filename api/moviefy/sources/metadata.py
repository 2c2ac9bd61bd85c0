from __future__ import annotations

from typing import Any

import httpx

from moviefy.core.config import settings
from moviefy.sources.http import SourceUnavailableError, fetch_json
from moviefy.sources.observability import SourceMonitor, source_monitor


class MetadataAPIClient:
    """Client for the third-party catalog API backing the external source."""
    source_name = "metadata_api"

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        attempts: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        monitor: SourceMonitor | None = None,
    ) -> None:
        self.base_url = (base_url or settings.metadata_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.attempts = attempts if attempts is not None else settings.metadata_api_max_attempts
        self._transport = transport
        self._monitor = monitor or source_monitor

    async def _get(
        self,
        operation: str,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        allow_missing: bool = False,
    ) -> dict[str, Any] | None:
        url = f"{self.base_url}{path}"

        async def _call() -> dict[str, Any] | None:
            try:
                return await fetch_json(
                    url,
                    params=params,
                    headers={"Accept": "application/json"},
                    timeout=self.timeout,
                    attempts=self.attempts,
                    transport=self._transport,
                )
            except SourceUnavailableError as exc:
                # 404 means the title does not exist.
                if allow_missing and exc.status_code == 404:
                    return None
                raise

        return await self._monitor.track(
            self.source_name, operation, _call, context={"path": path, "params": params or {}}
        )

    async def list_movies(self, *, sort_by: str, page: int, page_size: int) -> dict[str, Any]:
        """Return ``{"total_count", "movies": [...]}``."""
        return await self._get(
            "list_movies", "/api/movies", {"sort_by": sort_by, "page": page, "page_size": page_size}
        )

    async def list_tv_shows(self, *, sort_by: str, page: int, page_size: int) -> dict[str, Any]:
        """Return ``{"total_count", "tv_shows": [...]}``."""
        return await self._get(
            "list_tv_shows", "/api/tvshows", {"sort_by": sort_by, "page": page, "page_size": page_size}
        )

    async def search(self, query: str, *, page: int, page_size: int) -> dict[str, Any]:
        """Return ``{"total_count", "results": [...]}``."""
        return await self._get(
            "search", "/api/search/", {"query": query, "page": page, "page_size": page_size}
        )

    async def get_by_id(self, title_id: str) -> dict[str, Any] | None:
        """Return the detail object for a title, or None when it does not exist."""
        return await self._get("get_by_id", f"/api/id/{title_id}", allow_missing=True)
