"""Canonical listing/detail shapes produced by the catalog pipeline."""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field

from moviefy.models.media import LinkKind, MediaType, SourceKind


class SortOption(str, enum.Enum):
    """External listing order as ``field:direction``."""
    RATING_DESC = "rating:desc"
    RATING_ASC = "rating:asc"
    RELEASE_YEAR_DESC = "release_year:desc"
    RELEASE_YEAR_ASC = "release_year:asc"
    UPDATED_ON_DESC = "updated_on:desc"
    UPDATED_ON_ASC = "updated_on:asc"
    TITLE_ASC = "title:asc"
    TITLE_DESC = "title:desc"


class CatalogModel(BaseModel):
    """Immutable base for records assembled within a single request."""

    model_config = ConfigDict(frozen=True)


class DownloadLink(CatalogModel):
    name: str
    url: str
    link_kind: LinkKind
    size_label: str | None = None
    quality_label: str | None = None


class DownloadGroup(CatalogModel):
    quality_label: str
    links: tuple[DownloadLink, ...] = ()


class SeasonPackLink(CatalogModel):
    """Telegram deep link bundling every episode of a season at one tier."""
    quality_label: str
    tier: str
    url: str


class EpisodeDetail(CatalogModel):
    episode_number: int
    title: str | None = None
    description: str | None = None
    thumbnail_url: str | None = None
    backdrop_url: str | None = None
    links: tuple[DownloadLink, ...] = ()


class SeasonDetail(CatalogModel):
    season_number: int
    title: str | None = None
    description: str | None = None
    poster_url: str | None = None
    quality_tiers: tuple[str, ...] = ()
    season_packs: tuple[SeasonPackLink, ...] = ()
    episodes: tuple[EpisodeDetail, ...] = ()


class ListingItem(CatalogModel):
    """Card-sized record for browse and search views."""
    id: str
    title: str
    media_type: MediaType
    source_kind: SourceKind
    poster_url: str | None = None
    backdrop_url: str | None = None
    release_year: int | None = None
    rating: float | None = None
    rip: str | None = None
    languages: tuple[str, ...] = ()
    description: str | None = None


class DetailRecord(ListingItem):
    """Render-ready title detail with download links."""
    genres: tuple[str, ...] = ()
    runtime_minutes: int | None = None
    total_seasons: int | None = None
    total_episodes: int | None = None
    seasons: tuple[SeasonDetail, ...] = ()
    download_groups: tuple[DownloadGroup, ...] = ()
    seo_keywords: tuple[str, ...] = ()


class Page(CatalogModel):
    """One page of merged listing results.

    ``total_results`` is an approximation used to decide whether more pages
    exist; ``curated_count`` and ``external_total`` report both sources
    separately so callers can combine them exactly.
    """
    items: tuple[ListingItem, ...] = ()
    page: int
    page_size: int
    total_pages: int = 0
    total_results: int = 0
    curated_count: int = 0
    external_total: int = 0


class HomeSections(CatalogModel):
    featured: tuple[ListingItem, ...] = ()
    latest_movies: Page
    latest_tv_shows: Page


class ExternalPage(CatalogModel):
    """Normalized page from the metadata API before merging."""
    items: tuple[ListingItem, ...] = ()
    total_count: int = 0
    total_pages: int = 0

    @classmethod
    def empty(cls) -> "ExternalPage":
        return cls()


class SiteSettingsPublic(BaseModel):
    """Non-secret site settings exposed to the public API."""
    app_url: str | None = None
    telegram_channel_url: str | None = None
    how_to_download_video_url: str | None = None
    how_to_download_instructions: str | None = None
    disclaimer_content: str | None = None
    privacy_policy_content: str | None = None


class SiteSettingsRead(SiteSettingsPublic):
    enable_url_shortener: bool = False
    url_shortener_api_url: str | None = None
    url_shortener_api_key: str | None = None


class SiteSettingsUpdate(BaseModel):
    """Partial update; unset fields keep their stored values."""
    app_url: str | None = None
    telegram_channel_url: str | None = None
    how_to_download_video_url: str | None = None
    how_to_download_instructions: str | None = None
    disclaimer_content: str | None = None
    privacy_policy_content: str | None = None
    enable_url_shortener: bool | None = None
    url_shortener_api_url: str | None = None
    url_shortener_api_key: str | None = Field(default=None, repr=False)
