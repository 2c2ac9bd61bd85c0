"""Admin payloads for curated posts and ads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from moviefy.models.ad import AdExpiryUnit
from moviefy.models.media import LinkKind, MediaType
from moviefy.schema.base import ORMModel


class PostLinkInput(BaseModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    type: LinkKind
    size: str | None = None


class PostQualityOption(BaseModel):
    quality_label: str = Field(min_length=1)
    links: list[PostLinkInput] = Field(default_factory=list)


class PostCreate(BaseModel):
    """Admin form payload for a new curated title."""
    title: str = Field(min_length=1, max_length=500)
    media_type: MediaType
    description: str = ""
    poster_url: str
    backdrop_url: str | None = None
    release_year: int = Field(ge=1888, le=2100)
    rating: float | None = Field(default=None, ge=0, le=10)
    rip_quality: str = ""
    languages: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    runtime: int | None = Field(default=None, ge=1)
    total_seasons: int | None = Field(default=None, ge=1)
    total_episodes: int | None = Field(default=None, ge=1)
    telegram_options: list[PostQualityOption] = Field(default_factory=list)
    direct_download_options: list[PostQualityOption] = Field(default_factory=list)
    seo_keywords: list[str] = Field(default_factory=list)

    @field_validator("languages", "genres", "seo_keywords", mode="before")
    @classmethod
    def _split_csv(cls, value: str | list[str] | None) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return [str(item).strip() for item in value if str(item).strip()]

    @model_validator(mode="after")
    def _drop_fields_for_other_type(self) -> "PostCreate":
        """Runtime belongs to movies; season/episode totals belong to TV."""
        if self.media_type == MediaType.MOVIE:
            self.total_seasons = None
            self.total_episodes = None
        else:
            self.runtime = None
        return self


class PostRead(ORMModel):
    id: str
    title: str
    media_type: MediaType
    release_year: int | None = None
    poster_url: str | None = None
    created_at: datetime


class AdCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    poster_image_url: str = Field(min_length=1)
    button_label: str = Field(min_length=1, max_length=100)
    target_url: str = Field(min_length=1)
    expiry_value: int = Field(ge=1)
    expiry_unit: AdExpiryUnit = AdExpiryUnit.DAYS


class AdRead(ORMModel):
    id: str
    title: str
    poster_image_url: str
    button_label: str
    target_url: str
    expiry_value: int
    expiry_unit: AdExpiryUnit
    created_at: datetime
    expires_at: datetime
