from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from moviefy.models.media import LinkKind, MediaType
from moviefy.models.post import Post
from moviefy.pipeline.normalizer import normalize_curated_detail
from moviefy.schema.post import PostCreate
from moviefy.services import post_service
from moviefy.services.post_service import PostStore


def _payload(**overrides) -> PostCreate:
    data = {
        "title": "Curated Heist",
        "media_type": "movie",
        "description": "A carefully planned job.",
        "poster_url": "https://img.test/heist.jpg",
        "release_year": 2022,
        "rating": 7.9,
        "rip_quality": "WEB-DL",
        "languages": "Hindi, English",
        "genres": ["Crime", " Thriller "],
        "runtime": 128,
        "total_seasons": 2,
        "telegram_options": [
            {
                "quality_label": "720p",
                "links": [{"name": "Bot", "url": "https://t.me/bot?start=heist", "type": "telegram"}],
            }
        ],
        "direct_download_options": [
            {
                "quality_label": "1080p",
                "links": [{"name": "Mirror", "url": "https://dl.test/heist", "type": "direct", "size": "2 GB"}],
            }
        ],
        "seo_keywords": "heist, robbery",
    }
    data.update(overrides)
    return PostCreate.model_validate(data)


def test_post_ids_are_never_all_digits(monkeypatch: pytest.MonkeyPatch) -> None:
    class _FakeUUID:
        def __init__(self, value: str) -> None:
            self.hex = value

    values = iter([_FakeUUID("1234567890"), _FakeUUID("12ab")])
    monkeypatch.setattr(post_service.uuid, "uuid4", lambda: next(values))

    assert post_service.new_post_id() == "12ab"


def test_post_payload_normalizes_lists_and_type_fields() -> None:
    payload = _payload()
    assert payload.languages == ["Hindi", "English"]
    assert payload.genres == ["Crime", "Thriller"]
    assert payload.seo_keywords == ["heist", "robbery"]
    assert payload.total_seasons is None

    tv_payload = _payload(media_type="tv", total_episodes=16)
    assert tv_payload.runtime is None
    assert tv_payload.total_episodes == 16


@pytest.mark.asyncio
async def test_created_post_round_trips_through_store(session: AsyncSession) -> None:
    post = await post_service.create_post(session, _payload())
    store = PostStore(session)

    doc = await store.get_by_id(post.id)

    assert doc is not None
    assert doc["mediaType"] == "movie"
    assert doc["ripQuality"] == "WEB-DL"
    assert doc["telegramOptions"][0]["qualityLabel"] == "720p"
    assert "downloadOptions" not in doc

    detail = normalize_curated_detail(doc)
    assert detail is not None
    assert [group.links[0].link_kind for group in detail.download_groups] == [LinkKind.TELEGRAM, LinkKind.DIRECT]
    assert detail.download_groups[1].links[0].size_label == "2 GB"


@pytest.mark.asyncio
async def test_store_queries_filter_by_type(session: AsyncSession) -> None:
    movie = await post_service.create_post(session, _payload(title="Movie One"))
    show = await post_service.create_post(session, _payload(title="Show One", media_type="tv"))
    store = PostStore(session)

    movies = await store.query_by_type(MediaType.MOVIE)
    everything = await store.query_all()

    assert [doc["id"] for doc in movies] == [movie.id]
    assert {doc["id"] for doc in everything} == {movie.id, show.id}
    assert await store.get_by_id("missing") is None


@pytest.mark.asyncio
async def test_store_latest_returns_newest_posts_up_to_limit(session: AsyncSession) -> None:
    for day in range(1, 5):
        session.add(
            Post(
                id=f"post{day}",
                media_type=MediaType.MOVIE,
                title=f"Day {day}",
                created_at=datetime(2024, 5, day, tzinfo=timezone.utc),
            )
        )
    await session.commit()

    docs = await PostStore(session).latest(2)

    assert [doc["id"] for doc in docs] == ["post4", "post3"]


@pytest.mark.asyncio
async def test_legacy_rows_expose_download_options(session: AsyncSession) -> None:
    session.add(
        Post(
            id="legacy01",
            media_type=MediaType.MOVIE,
            title="Legacy Post",
            download_options=[
                {"qualityLabel": "480p", "links": [{"name": "Old", "url": "https://dl.test/old", "type": "direct"}]}
            ],
        )
    )
    await session.commit()

    doc = await PostStore(session).get_by_id("legacy01")

    assert doc is not None
    assert doc["downloadOptions"][0]["qualityLabel"] == "480p"
    detail = normalize_curated_detail(doc)
    assert detail is not None
    assert detail.download_groups[0].links[0].url == "https://dl.test/old"


@pytest.mark.asyncio
async def test_delete_post(session: AsyncSession) -> None:
    post = await post_service.create_post(session, _payload())

    await post_service.delete_post(session, post.id)

    assert await post_service.list_posts(session) == []
    with pytest.raises(ValueError):
        await post_service.delete_post(session, post.id)
