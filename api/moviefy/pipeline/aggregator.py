"""Merge curated posts and metadata API results into paged listings.

Invariants:
- Curated items appear only on page 1 and always precede external items.
- Search never returns two items with the same ID; the curated copy wins.
- An unavailable source contributes an empty result; the other source still
  renders. A failed external call reports ``total_pages == 0``.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from time import monotonic
from typing import Any, Callable, Iterable, Mapping

from moviefy.core.config import settings
from moviefy.models.media import MediaType
from moviefy.pipeline.normalizer import (
    infer_search_media_type,
    normalize_curated_listing,
    normalize_external_listing,
)
from moviefy.pipeline.ports import CuratedStore, ExternalCatalog
from moviefy.schema.catalog import ExternalPage, HomeSections, ListingItem, Page, SortOption
from moviefy.sources.http import SourceUnavailableError

logger = logging.getLogger("moviefy.pipeline.aggregator")

_LISTING_KEYS = {MediaType.MOVIE: "movies", MediaType.TV: "tv_shows"}
_SEARCH_FIELDS = ("title", "description")
_SEARCH_LIST_FIELDS = ("seoKeywords", "genres")


def _total_pages(total_count: int, page_size: int) -> int:
    if total_count <= 0 or page_size <= 0:
        return 0
    return math.ceil(total_count / page_size)


def _count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return max(number, 0)


def _external_page(
    raw_items: Any,
    total_count: Any,
    page_size: int,
    infer: Callable[[Mapping[str, Any]], MediaType],
) -> ExternalPage:
    entries = raw_items if isinstance(raw_items, list) else []
    items: list[ListingItem] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        item = normalize_external_listing(entry, infer(entry))
        if item is not None:
            items.append(item)
    total = _count(total_count)
    return ExternalPage(items=tuple(items), total_count=total, total_pages=_total_pages(total, page_size))


def _matches(doc: Mapping[str, Any], needle: str) -> bool:
    for field in _SEARCH_FIELDS:
        value = doc.get(field)
        if isinstance(value, str) and needle in value.casefold():
            return True
    for field in _SEARCH_LIST_FIELDS:
        values = doc.get(field)
        if isinstance(values, str):
            values = [values]
        if not isinstance(values, list):
            continue
        if any(isinstance(value, str) and needle in value.casefold() for value in values):
            return True
    return False


def _curated_items(docs: Iterable[Mapping[str, Any]]) -> list[ListingItem]:
    items: list[ListingItem] = []
    for doc in docs:
        item = normalize_curated_listing(doc)
        if item is not None:
            items.append(item)
    return items


async def _nothing() -> list[ListingItem]:
    return []


@dataclass(slots=True)
class CatalogAggregator:
    """Build merged listing, search and home pages from both sources."""
    store: CuratedStore
    external: ExternalCatalog

    async def list_movies(
        self,
        page: int = 1,
        page_size: int | None = None,
        sort: SortOption = SortOption.UPDATED_ON_DESC,
    ) -> Page:
        return await self._listing(MediaType.MOVIE, page, page_size or settings.page_size_listings, sort)

    async def list_tv_shows(
        self,
        page: int = 1,
        page_size: int | None = None,
        sort: SortOption = SortOption.UPDATED_ON_DESC,
    ) -> Page:
        return await self._listing(MediaType.TV, page, page_size or settings.page_size_listings, sort)

    async def search(self, query: str, page: int = 1, page_size: int | None = None) -> Page:
        """Search both sources; curated hits are removed from the external slice.

        ``total_results`` on page 1 is curated + unique external + the external
        results not yet fetched. It is an approximation for "more pages exist";
        ``curated_count`` and ``external_total`` carry the exact inputs.
        """
        page_size = page_size or settings.page_size_search
        needle = (query or "").strip()
        if not needle:
            return Page(page=page, page_size=page_size)

        search_start = monotonic()
        curated, external = await asyncio.gather(
            self._curated_search(needle) if page == 1 else _nothing(),
            self._external_search(needle, page, page_size),
        )
        curated_ids = {item.id for item in curated}
        unique_external = [item for item in external.items if item.id not in curated_ids]
        not_fetched = max(external.total_count - len(external.items), 0)
        total_results = len(curated) + len(unique_external) + not_fetched
        logger.info(
            "Catalog search completed",
            extra={
                "query_length": len(needle),
                "page": page,
                "curated": len(curated),
                "external_returned": len(external.items),
                "external_deduped": len(external.items) - len(unique_external),
                "external_total": external.total_count,
                "search_ms": round((monotonic() - search_start) * 1000, 2),
            },
        )
        return Page(
            items=tuple(curated + unique_external),
            page=page,
            page_size=page_size,
            total_pages=external.total_pages,
            total_results=total_results,
            curated_count=len(curated),
            external_total=external.total_count,
        )

    async def home_sections(self, limit: int | None = None) -> HomeSections:
        """Newest curated posts plus the latest page of each external listing."""
        limit = limit or settings.home_section_item_count
        featured, movies, tv_shows = await asyncio.gather(
            self._curated_featured(limit),
            self._external_listing(MediaType.MOVIE, 1, limit, SortOption.UPDATED_ON_DESC),
            self._external_listing(MediaType.TV, 1, limit, SortOption.UPDATED_ON_DESC),
        )
        return HomeSections(
            featured=tuple(featured),
            latest_movies=self._external_only(movies, limit),
            latest_tv_shows=self._external_only(tv_shows, limit),
        )

    @staticmethod
    def _external_only(external: ExternalPage, page_size: int) -> Page:
        return Page(
            items=external.items,
            page=1,
            page_size=page_size,
            total_pages=external.total_pages,
            total_results=external.total_count,
            external_total=external.total_count,
        )

    async def _listing(self, media_type: MediaType, page: int, page_size: int, sort: SortOption) -> Page:
        curated, external = await asyncio.gather(
            self._curated_by_type(media_type) if page == 1 else _nothing(),
            self._external_listing(media_type, page, page_size, sort),
        )
        return Page(
            items=tuple(curated + list(external.items)),
            page=page,
            page_size=page_size,
            total_pages=external.total_pages,
            total_results=external.total_count,
            curated_count=len(curated),
            external_total=external.total_count,
        )

    async def _curated_by_type(self, media_type: MediaType) -> list[ListingItem]:
        try:
            docs = await self.store.query_by_type(media_type)
        except SourceUnavailableError as exc:
            logger.warning("Curated %s listing unavailable: %s", media_type.value, exc)
            return []
        # Documents stored with a different type are never shown on this listing.
        return [item for item in _curated_items(docs) if item.media_type == media_type]

    async def _curated_featured(self, limit: int) -> list[ListingItem]:
        try:
            docs = await self.store.latest(limit)
        except SourceUnavailableError as exc:
            logger.warning("Curated posts unavailable: %s", exc)
            return []
        return _curated_items(docs)

    async def _curated_search(self, needle: str) -> list[ListingItem]:
        try:
            docs = await self.store.query_all()
        except SourceUnavailableError as exc:
            logger.warning("Curated search unavailable: %s", exc)
            return []
        folded = needle.casefold()
        return _curated_items(doc for doc in docs if _matches(doc, folded))

    async def _external_listing(
        self, media_type: MediaType, page: int, page_size: int, sort: SortOption
    ) -> ExternalPage:
        fetch = self.external.list_movies if media_type == MediaType.MOVIE else self.external.list_tv_shows
        try:
            payload = await fetch(sort_by=sort.value, page=page, page_size=page_size)
        except SourceUnavailableError as exc:
            logger.warning("External %s listing unavailable: %s", media_type.value, exc)
            return ExternalPage.empty()
        payload = payload or {}
        return _external_page(
            payload.get(_LISTING_KEYS[media_type]),
            payload.get("total_count"),
            page_size,
            lambda _entry: media_type,
        )

    async def _external_search(self, query: str, page: int, page_size: int) -> ExternalPage:
        try:
            payload = await self.external.search(query, page=page, page_size=page_size)
        except SourceUnavailableError as exc:
            logger.warning("External search unavailable: %s", exc)
            return ExternalPage.empty()
        payload = payload or {}
        return _external_page(
            payload.get("results"),
            payload.get("total_count"),
            page_size,
            infer_search_media_type,
        )
