"""Curated post persistence and the document view used by the catalog pipeline."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from moviefy.models.media import MediaType
from moviefy.models.post import Post
from moviefy.schema.post import PostCreate, PostQualityOption
from moviefy.sources.http import SourceUnavailableError

logger = logging.getLogger("moviefy.services.posts")


def new_post_id() -> str:
    """Random hex ID; an all-digit value would be routed to the metadata API."""
    while True:
        candidate = uuid.uuid4().hex
        if not candidate.isdigit():
            return candidate


def _quality_options(options: list[PostQualityOption]) -> list[dict[str, Any]]:
    return [
        {
            "qualityLabel": option.quality_label,
            "links": [link.model_dump(mode="json") for link in option.links],
        }
        for option in options
    ]


def post_to_document(post: Post) -> dict[str, Any]:
    """Render a row in the camelCase document shape the admin form writes."""
    doc: dict[str, Any] = {
        "id": post.id,
        "mediaType": post.media_type.value if post.media_type else None,
        "title": post.title,
        "description": post.description,
        "posterUrl": post.poster_url,
        "backdropUrl": post.backdrop_url,
        "releaseYear": post.release_year,
        "rating": post.rating,
        "ripQuality": post.rip_quality,
        "languages": post.languages or [],
        "genres": post.genres or [],
        "runtime": post.runtime,
        "totalSeasons": post.total_seasons,
        "totalEpisodes": post.total_episodes,
        "telegramOptions": post.telegram_options or [],
        "directDownloadOptions": post.direct_download_options or [],
        "seoKeywords": post.seo_keywords or [],
        "createdAt": post.created_at.isoformat() if post.created_at else None,
    }
    if post.download_options is not None:
        doc["downloadOptions"] = post.download_options
    return doc


async def create_post(session: AsyncSession, payload: PostCreate) -> Post:
    """Persist a new curated post under a fresh non-numeric ID."""
    post = Post(
        id=new_post_id(),
        media_type=payload.media_type,
        title=payload.title.strip(),
        description=payload.description,
        poster_url=payload.poster_url,
        backdrop_url=payload.backdrop_url,
        release_year=payload.release_year,
        rating=payload.rating,
        rip_quality=payload.rip_quality,
        languages=payload.languages,
        genres=payload.genres,
        runtime=payload.runtime,
        total_seasons=payload.total_seasons,
        total_episodes=payload.total_episodes,
        telegram_options=_quality_options(payload.telegram_options),
        direct_download_options=_quality_options(payload.direct_download_options),
        seo_keywords=payload.seo_keywords,
    )
    session.add(post)
    await session.commit()
    await session.refresh(post)
    logger.info("Created curated post", extra={"post_id": post.id, "media_type": post.media_type.value})
    return post


async def list_posts(session: AsyncSession, media_type: MediaType | None = None) -> list[Post]:
    """List posts newest first, optionally restricted to one media type."""
    stmt = select(Post).order_by(Post.created_at.desc(), Post.id)
    if media_type is not None:
        stmt = stmt.where(Post.media_type == media_type)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def latest_posts(session: AsyncSession, limit: int) -> list[Post]:
    """Newest curated posts for the featured strip."""
    result = await session.execute(select(Post).order_by(Post.created_at.desc(), Post.id).limit(limit))
    return list(result.scalars().all())


async def delete_post(session: AsyncSession, post_id: str) -> None:
    post = await session.get(Post, post_id)
    if not post:
        raise ValueError("Post not found")
    await session.delete(post)
    await session.commit()
    logger.info("Deleted curated post", extra={"post_id": post_id})


class PostStore:
    """Read-only document access to curated posts for the catalog pipeline.

    Database failures surface as ``SourceUnavailableError`` so callers can
    degrade to an empty curated slice.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, post_id: str) -> dict[str, Any] | None:
        try:
            post = await self.session.get(Post, post_id)
        except SQLAlchemyError as exc:
            raise SourceUnavailableError(f"Post lookup failed: {exc}") from exc
        return post_to_document(post) if post else None

    async def query_by_type(self, media_type: MediaType) -> list[dict[str, Any]]:
        return await self._query(media_type)

    async def query_all(self) -> list[dict[str, Any]]:
        return await self._query(None)

    async def latest(self, limit: int) -> list[dict[str, Any]]:
        try:
            posts = await latest_posts(self.session, limit)
        except SQLAlchemyError as exc:
            raise SourceUnavailableError(f"Featured post query failed: {exc}") from exc
        return [post_to_document(post) for post in posts]

    async def _query(self, media_type: MediaType | None) -> list[dict[str, Any]]:
        try:
            posts = await list_posts(self.session, media_type)
        except SQLAlchemyError as exc:
            raise SourceUnavailableError(f"Post query failed: {exc}") from exc
        return [post_to_document(post) for post in posts]
