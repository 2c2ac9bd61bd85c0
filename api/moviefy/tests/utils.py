"""Shared stubs and record builders for catalog tests."""

from __future__ import annotations

from typing import Any

import httpx

from moviefy.models.media import MediaType
from moviefy.sources.http import SourceUnavailableError
from moviefy.sources.metadata import MetadataAPIClient
from moviefy.sources.observability import SourceMonitor

ADMIN_KEY = "test-admin-key"
METADATA_BASE_URL = "https://metadata.test"


def external_listing(tmdb_id: int, title: str, **overrides: Any) -> dict[str, Any]:
    record = {
        "tmdb_id": tmdb_id,
        "title": title,
        "poster": f"https://img.test/{tmdb_id}.jpg",
        "release_year": 2021,
        "rating": 7.5,
        "rip": "WEB-DL",
        "languages": ["English"],
    }
    record.update(overrides)
    return record


def curated_doc(post_id: str, title: str, media_type: str = "movie", **overrides: Any) -> dict[str, Any]:
    doc = {
        "id": post_id,
        "mediaType": media_type,
        "title": title,
        "description": f"{title} description",
        "posterUrl": f"https://img.test/{post_id}.jpg",
        "releaseYear": 2023,
        "rating": 8.1,
        "ripQuality": "BluRay",
        "languages": ["Hindi", "English"],
        "genres": ["Action"],
        "seoKeywords": [],
        "telegramOptions": [],
        "directDownloadOptions": [],
    }
    doc.update(overrides)
    return doc


class StubMetadataAPI:
    """In-memory metadata API served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.movies: list[dict[str, Any]] = []
        self.tv_shows: list[dict[str, Any]] = []
        self.search_results: list[dict[str, Any]] = []
        self.titles: dict[str, dict[str, Any]] = {}
        self.total_count: int | None = None
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def _page(self, key: str, items: list[dict[str, Any]]) -> httpx.Response:
        total = self.total_count if self.total_count is not None else len(items)
        return httpx.Response(200, json={"total_count": total, key: items})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"detail": "unavailable"})
        path = request.url.path
        if path == "/api/movies":
            return self._page("movies", self.movies)
        if path == "/api/tvshows":
            return self._page("tv_shows", self.tv_shows)
        if path == "/api/search/":
            return self._page("results", self.search_results)
        if path.startswith("/api/id/"):
            title = self.titles.get(path.rsplit("/", 1)[-1])
            if title is None:
                return httpx.Response(404, json={"detail": "Not Found"})
            return httpx.Response(200, json=title)
        return httpx.Response(404, json={"detail": "Not Found"})

    def client(self, monitor: SourceMonitor | None = None) -> MetadataAPIClient:
        return MetadataAPIClient(
            METADATA_BASE_URL,
            attempts=1,
            transport=httpx.MockTransport(self.handler),
            monitor=monitor,
        )


class StubStore:
    """Curated store backed by a list of documents, newest first."""

    def __init__(self, docs: list[dict[str, Any]] | None = None, *, fail: bool = False) -> None:
        self.docs = list(docs or [])
        self.fail = fail
        self.latest_limits: list[int] = []

    def _check(self) -> None:
        if self.fail:
            raise SourceUnavailableError("store offline")

    async def get_by_id(self, post_id: str) -> dict[str, Any] | None:
        self._check()
        return next((doc for doc in self.docs if doc.get("id") == post_id), None)

    async def query_by_type(self, media_type: MediaType) -> list[dict[str, Any]]:
        self._check()
        return [doc for doc in self.docs if doc.get("mediaType") == media_type.value]

    async def query_all(self) -> list[dict[str, Any]]:
        self._check()
        return list(self.docs)

    async def latest(self, limit: int) -> list[dict[str, Any]]:
        self._check()
        self.latest_limits.append(limit)
        return self.docs[:limit]
