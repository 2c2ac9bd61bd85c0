"""Normalize curated posts and metadata API records into catalog shapes.

Invariants:
- Every function here is pure and total over mappings: malformed optional
  fields become None/empty, a record without an ID or title becomes None.
- No display sentinels ("N/A", placeholder images) are produced here.
- ``media_type`` is always movie or tv; the API's ``episode`` maps to tv.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping

from moviefy.models.media import LinkKind, MediaType, SourceKind
from moviefy.pipeline.urls import LinkTemplates
from moviefy.schema.catalog import (
    DetailRecord,
    DownloadGroup,
    DownloadLink,
    EpisodeDetail,
    ListingItem,
    SeasonDetail,
    SeasonPackLink,
)

CANONICAL_TIERS = ("480p", "720p", "1080p")

_MEDIA_TYPE_ALIASES = {
    "movie": MediaType.MOVIE,
    "tv": MediaType.TV,
    "episode": MediaType.TV,
}


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _identifier(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    return _text(value)


def _int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _rating(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    rating = float(value)
    if not math.isfinite(rating) or rating < 0 or rating > 10:
        return None
    return rating


def _url(value: Any) -> str | None:
    text = _text(value)
    if text and (text.startswith("http://") or text.startswith("https://")):
        return text
    return None


def _strings(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    items: list[str] = []
    for entry in value:
        if isinstance(entry, (int, float)) and not isinstance(entry, bool):
            entry = str(entry)
        text = _text(entry)
        if text:
            items.append(text)
    return tuple(items)


def _mappings(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [entry for entry in value if isinstance(entry, Mapping)]


def parse_media_type(value: Any) -> MediaType | None:
    text = _text(value)
    if not text:
        return None
    return _MEDIA_TYPE_ALIASES.get(text.lower())


def infer_search_media_type(doc: Mapping[str, Any]) -> MediaType:
    """Fallback type for search hits that omit ``media_type``."""
    title = _text(doc.get("title")) if isinstance(doc, Mapping) else None
    if title and "series" in title.lower():
        return MediaType.TV
    return MediaType.MOVIE


def normalize_curated_listing(doc: Mapping[str, Any]) -> ListingItem | None:
    if not isinstance(doc, Mapping):
        return None
    title_id = _identifier(doc.get("id"))
    title = _text(doc.get("title"))
    if not title_id or not title:
        return None
    return ListingItem(
        id=title_id,
        title=title,
        media_type=parse_media_type(doc.get("mediaType")) or MediaType.MOVIE,
        source_kind=SourceKind.CURATED,
        poster_url=_url(doc.get("posterUrl")),
        backdrop_url=_url(doc.get("backdropUrl")),
        release_year=_int(doc.get("releaseYear")),
        rating=_rating(doc.get("rating")),
        rip=_text(doc.get("ripQuality")),
        languages=_strings(doc.get("languages")),
        description=_text(doc.get("description")),
    )


def normalize_external_listing(doc: Mapping[str, Any], inferred_media_type: MediaType) -> ListingItem | None:
    if not isinstance(doc, Mapping):
        return None
    title_id = _identifier(doc.get("tmdb_id"))
    title = _text(doc.get("title"))
    if not title_id or not title:
        return None
    return ListingItem(
        id=title_id,
        title=title,
        media_type=parse_media_type(doc.get("media_type")) or inferred_media_type,
        source_kind=SourceKind.EXTERNAL,
        poster_url=_url(doc.get("poster")),
        backdrop_url=_url(doc.get("backdrop")),
        release_year=_int(doc.get("release_year")),
        rating=_rating(doc.get("rating")),
        rip=_text(doc.get("rip")),
        languages=_strings(doc.get("languages")),
        description=_text(doc.get("description")),
    )


# Curated link layouts. Older admin forms stored a single ``downloadOptions``
# array with a per-link type; current forms store two separate groups.


@dataclass(frozen=True, slots=True)
class CanonicalLinkLayout:
    telegram_options: list[Mapping[str, Any]]
    direct_download_options: list[Mapping[str, Any]]
    kind: Literal["canonical"] = "canonical"


@dataclass(frozen=True, slots=True)
class LegacyLinkLayout:
    download_options: list[Mapping[str, Any]]
    kind: Literal["legacy"] = "legacy"


def curated_link_layout(doc: Mapping[str, Any]) -> CanonicalLinkLayout | LegacyLinkLayout:
    telegram_options = _mappings(doc.get("telegramOptions"))
    direct_options = _mappings(doc.get("directDownloadOptions"))
    legacy_options = _mappings(doc.get("downloadOptions"))
    if not telegram_options and not direct_options and legacy_options:
        return LegacyLinkLayout(download_options=legacy_options)
    return CanonicalLinkLayout(telegram_options=telegram_options, direct_download_options=direct_options)


def _curated_link(raw: Mapping[str, Any], kind: LinkKind, quality_label: str) -> DownloadLink | None:
    url = _text(raw.get("url"))
    if not url:
        return None
    return DownloadLink(
        name=_text(raw.get("name")) or "",
        url=url,
        link_kind=kind,
        size_label=_text(raw.get("size")),
        quality_label=quality_label or None,
    )


def _curated_groups(options: Iterable[Mapping[str, Any]], kind: LinkKind) -> list[DownloadGroup]:
    groups: list[DownloadGroup] = []
    for option in options:
        label = _text(option.get("qualityLabel")) or ""
        links = [
            link
            for raw in _mappings(option.get("links"))
            if (link := _curated_link(raw, kind, label)) is not None
        ]
        if links:
            groups.append(DownloadGroup(quality_label=label, links=tuple(links)))
    return groups


def _legacy_groups(options: Iterable[Mapping[str, Any]]) -> tuple[list[DownloadGroup], list[DownloadGroup]]:
    """Split each legacy quality option into telegram and direct groups by link type."""
    telegram_groups: list[DownloadGroup] = []
    direct_groups: list[DownloadGroup] = []
    for option in options:
        label = _text(option.get("qualityLabel")) or ""
        telegram_links: list[DownloadLink] = []
        direct_links: list[DownloadLink] = []
        for raw in _mappings(option.get("links")):
            is_telegram = _text(raw.get("type")) == LinkKind.TELEGRAM.value
            link = _curated_link(raw, LinkKind.TELEGRAM if is_telegram else LinkKind.DIRECT, label)
            if link is None:
                continue
            (telegram_links if is_telegram else direct_links).append(link)
        if telegram_links:
            telegram_groups.append(DownloadGroup(quality_label=label, links=tuple(telegram_links)))
        if direct_links:
            direct_groups.append(DownloadGroup(quality_label=label, links=tuple(direct_links)))
    return telegram_groups, direct_groups


def curated_download_groups(doc: Mapping[str, Any]) -> tuple[DownloadGroup, ...]:
    layout = curated_link_layout(doc)
    if isinstance(layout, LegacyLinkLayout):
        telegram_groups, direct_groups = _legacy_groups(layout.download_options)
    else:
        telegram_groups = _curated_groups(layout.telegram_options, LinkKind.TELEGRAM)
        direct_groups = _curated_groups(layout.direct_download_options, LinkKind.DIRECT)
    return tuple(telegram_groups + direct_groups)


def normalize_curated_detail(doc: Mapping[str, Any]) -> DetailRecord | None:
    listing = normalize_curated_listing(doc)
    if listing is None:
        return None
    is_movie = listing.media_type == MediaType.MOVIE
    return DetailRecord(
        **listing.model_dump(),
        genres=_strings(doc.get("genres")),
        runtime_minutes=_int(doc.get("runtime")) if is_movie else None,
        total_seasons=None if is_movie else _int(doc.get("totalSeasons")),
        total_episodes=None if is_movie else _int(doc.get("totalEpisodes")),
        download_groups=curated_download_groups(doc),
        seo_keywords=_strings(doc.get("seoKeywords")),
    )


def canonical_tier(quality: str) -> str:
    """Map a quality label onto 480p/720p/1080p by substring, else keep it verbatim."""
    lowered = quality.lower()
    for tier in CANONICAL_TIERS:
        if tier in lowered:
            return tier
    return quality


def _tier_sort_key(tier: str, label: str) -> tuple[int, int, str]:
    if tier in CANONICAL_TIERS:
        return (0, CANONICAL_TIERS.index(tier), "")
    return (1, 0, label)


def _season_tiers(episodes: Iterable[Mapping[str, Any]]) -> list[tuple[str, str]]:
    """Unique (tier, label) pairs across a season's episode files, canonical tiers first."""
    labels_by_tier: dict[str, str] = {}
    for episode in episodes:
        for raw in _mappings(episode.get("telegram")):
            quality = _text(raw.get("quality"))
            if quality:
                labels_by_tier.setdefault(canonical_tier(quality), quality)
    return sorted(labels_by_tier.items(), key=lambda pair: _tier_sort_key(*pair))


def season_qualities(season: Mapping[str, Any]) -> list[str]:
    """Quality labels offered as season packs, e.g. ``["480p", "720p", "1080p HEVC"]``."""
    if not isinstance(season, Mapping):
        return []
    return [label for _, label in _season_tiers(_mappings(season.get("episodes")))]


def _numbered(entries: Iterable[Mapping[str, Any]], key: str) -> list[tuple[int, Mapping[str, Any]]]:
    numbered = [(number, entry) for entry in entries if (number := _int(entry.get(key))) is not None]
    return sorted(numbered, key=lambda pair: pair[0])


def _stream_link(raw: Mapping[str, Any], templates: LinkTemplates) -> DownloadLink | None:
    content_id = _identifier(raw.get("id"))
    name = _text(raw.get("name"))
    if not content_id or not name:
        return None
    return DownloadLink(
        name=name,
        url=templates.stream(content_id, name),
        link_kind=LinkKind.DIRECT,
        size_label=_text(raw.get("size")),
        quality_label=_text(raw.get("quality")),
    )


def _external_download_groups(
    title_id: str, files: list[Mapping[str, Any]], templates: LinkTemplates
) -> tuple[DownloadGroup, ...]:
    """Group flat file entries by quality, synthesizing direct and bot links per file."""
    links_by_label: dict[str, list[DownloadLink]] = {}
    for raw in files:
        quality = _text(raw.get("quality"))
        label = quality or ""
        links = links_by_label.setdefault(label, [])
        direct = _stream_link(raw, templates)
        if direct is not None:
            links.append(direct)
        if quality:
            links.append(
                DownloadLink(
                    name=_text(raw.get("name")) or quality,
                    url=templates.telegram_file(title_id, quality),
                    link_kind=LinkKind.TELEGRAM,
                    size_label=_text(raw.get("size")),
                    quality_label=quality,
                )
            )
    return tuple(
        DownloadGroup(quality_label=label, links=tuple(links)) for label, links in links_by_label.items() if links
    )


def _external_seasons(title_id: str, raw_seasons: Any, templates: LinkTemplates) -> tuple[SeasonDetail, ...]:
    seasons: list[SeasonDetail] = []
    for season_number, season in _numbered(_mappings(raw_seasons), "season_number"):
        raw_episodes = _mappings(season.get("episodes"))
        tiers = _season_tiers(raw_episodes)
        episodes = tuple(
            EpisodeDetail(
                episode_number=episode_number,
                title=_text(episode.get("title")),
                description=_text(episode.get("description")),
                thumbnail_url=_url(episode.get("thumbnail")),
                backdrop_url=_url(episode.get("episode_backdrop")),
                links=tuple(
                    link
                    for raw in _mappings(episode.get("telegram"))
                    if (link := _stream_link(raw, templates)) is not None
                ),
            )
            for episode_number, episode in _numbered(raw_episodes, "episode_number")
        )
        seasons.append(
            SeasonDetail(
                season_number=season_number,
                title=_text(season.get("title")),
                description=_text(season.get("description")),
                poster_url=_url(season.get("poster")),
                quality_tiers=tuple(label for _, label in tiers),
                season_packs=tuple(
                    SeasonPackLink(
                        quality_label=label,
                        tier=tier,
                        url=templates.season_pack(title_id, season_number, tier),
                    )
                    for tier, label in tiers
                ),
                episodes=episodes,
            )
        )
    return tuple(seasons)


def normalize_external_detail(doc: Mapping[str, Any], templates: LinkTemplates) -> DetailRecord | None:
    if not isinstance(doc, Mapping):
        return None
    media_type = parse_media_type(doc.get("media_type"))
    if media_type is None:
        return None
    listing = normalize_external_listing(doc, media_type)
    if listing is None:
        return None
    is_movie = media_type == MediaType.MOVIE
    return DetailRecord(
        **listing.model_dump(),
        genres=_strings(doc.get("genres")),
        runtime_minutes=_int(doc.get("runtime")) if is_movie else None,
        total_seasons=None if is_movie else _int(doc.get("total_seasons")),
        total_episodes=None if is_movie else _int(doc.get("total_episodes")),
        seasons=() if is_movie else _external_seasons(listing.id, doc.get("seasons"), templates),
        download_groups=_external_download_groups(listing.id, _mappings(doc.get("telegram")), templates),
    )
