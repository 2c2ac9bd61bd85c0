"""Admin-curated catalog posts stored as document-shaped rows."""

from __future__ import annotations

import typing
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from moviefy.db.base_class import Base
from moviefy.models.media import JSON_COMPATIBLE, MediaType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """A first-party title entered through the admin panel.

    Link groups and list fields are kept as JSON so stored rows keep the
    document shape the admin form produced, including the legacy
    ``download_options`` array written by older versions of the form.
    """
    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    media_type: Mapped[MediaType] = mapped_column(
        Enum(MediaType, name="media_type", values_callable=lambda enum_cls: [e.value for e in enum_cls]),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text())
    poster_url: Mapped[str | None] = mapped_column(String(1024))
    backdrop_url: Mapped[str | None] = mapped_column(String(1024))
    release_year: Mapped[int | None] = mapped_column(Integer)
    rating: Mapped[float | None] = mapped_column(Float)
    rip_quality: Mapped[str | None] = mapped_column(String(100))
    languages: Mapped[list[str] | None] = mapped_column(JSON_COMPATIBLE, default=list)
    genres: Mapped[list[str] | None] = mapped_column(JSON_COMPATIBLE, default=list)
    runtime: Mapped[int | None] = mapped_column(Integer)
    total_seasons: Mapped[int | None] = mapped_column(Integer)
    total_episodes: Mapped[int | None] = mapped_column(Integer)
    telegram_options: Mapped[list[dict[str, typing.Any]] | None] = mapped_column(JSON_COMPATIBLE, default=list)
    direct_download_options: Mapped[list[dict[str, typing.Any]] | None] = mapped_column(
        JSON_COMPATIBLE, default=list
    )
    download_options: Mapped[list[dict[str, typing.Any]] | None] = mapped_column(JSON_COMPATIBLE)
    seo_keywords: Mapped[list[str] | None] = mapped_column(JSON_COMPATIBLE, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
