"""Assemble a render-ready detail record for one title ID.

Invariants:
- The ID shape alone picks the source; a curated miss never falls back to
  the metadata API or the other way around.
- A missing record, an unavailable source and a media-type mismatch all
  produce None (not found).
- Link resolution preserves every link's position: the i-th URL collected
  is replaced by the i-th resolved URL.
"""

from __future__ import annotations

import logging
from typing import Iterator

from moviefy.models.media import MediaType, SourceKind
from moviefy.pipeline.link_resolver import LinkResolver
from moviefy.pipeline.normalizer import normalize_curated_detail, normalize_external_detail
from moviefy.pipeline.ports import CuratedStore, ExternalCatalog
from moviefy.pipeline.routing import SourceRouter, source_router
from moviefy.pipeline.urls import LinkTemplates
from moviefy.schema.catalog import DetailRecord, DownloadGroup, DownloadLink, SeasonDetail
from moviefy.sources.http import SourceUnavailableError

logger = logging.getLogger("moviefy.pipeline.detail")


def collect_link_urls(record: DetailRecord) -> list[str]:
    """Every outbound URL of ``record`` in render order."""
    urls = [link.url for group in record.download_groups for link in group.links]
    for season in record.seasons:
        urls.extend(pack.url for pack in season.season_packs)
        for episode in season.episodes:
            urls.extend(link.url for link in episode.links)
    return urls


def _relinked(links: tuple[DownloadLink, ...], resolved: Iterator[str]) -> tuple[DownloadLink, ...]:
    return tuple(link.model_copy(update={"url": next(resolved) or link.url}) for link in links)


def _relinked_season(season: SeasonDetail, resolved: Iterator[str]) -> SeasonDetail:
    packs = tuple(pack.model_copy(update={"url": next(resolved) or pack.url}) for pack in season.season_packs)
    episodes = tuple(
        episode.model_copy(update={"links": _relinked(episode.links, resolved)}) for episode in season.episodes
    )
    return season.model_copy(update={"season_packs": packs, "episodes": episodes})


def apply_resolved_urls(record: DetailRecord, urls: list[str]) -> DetailRecord:
    """Write ``urls`` back in the order produced by ``collect_link_urls``."""
    resolved = iter(urls)
    groups = tuple(
        DownloadGroup(quality_label=group.quality_label, links=_relinked(group.links, resolved))
        for group in record.download_groups
    )
    seasons = tuple(_relinked_season(season, resolved) for season in record.seasons)
    return record.model_copy(update={"download_groups": groups, "seasons": seasons})


class DetailAssembler:
    """Route, fetch, normalize and link-resolve a single title."""

    def __init__(
        self,
        store: CuratedStore,
        external: ExternalCatalog,
        resolver: LinkResolver,
        *,
        templates: LinkTemplates | None = None,
        router: SourceRouter | None = None,
    ) -> None:
        self.store = store
        self.external = external
        self.resolver = resolver
        self.templates = templates or LinkTemplates.from_settings()
        self.router = router or source_router

    async def get_detail(self, title_id: str, expected_media_type: MediaType) -> DetailRecord | None:
        source = self.router.classify(title_id)
        if source == SourceKind.EXTERNAL:
            record = await self._external_detail(title_id)
        else:
            record = await self._curated_detail(title_id)
        if record is None:
            logger.info("Title %s not found in %s source", title_id, source.value)
            return None
        if record.media_type != expected_media_type:
            logger.info(
                "Title %s is %s, requested as %s",
                title_id,
                record.media_type.value,
                expected_media_type.value,
            )
            return None
        return await self.resolve_links(record)

    async def resolve_links(self, record: DetailRecord) -> DetailRecord:
        urls = collect_link_urls(record)
        if not urls:
            return record
        return apply_resolved_urls(record, await self.resolver.resolve_many(urls))

    async def _curated_detail(self, title_id: str) -> DetailRecord | None:
        try:
            doc = await self.store.get_by_id(title_id)
        except SourceUnavailableError as exc:
            logger.warning("Curated post %s unavailable: %s", title_id, exc)
            return None
        return normalize_curated_detail(doc) if doc else None

    async def _external_detail(self, title_id: str) -> DetailRecord | None:
        try:
            doc = await self.external.get_by_id(title_id)
        except SourceUnavailableError as exc:
            logger.warning("External title %s unavailable: %s", title_id, exc)
            return None
        return normalize_external_detail(doc, self.templates) if doc else None
