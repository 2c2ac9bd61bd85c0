"""Promotional banner services."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moviefy.models.ad import Ad, AdExpiryUnit
from moviefy.schema.post import AdCreate

_UNIT_SECONDS = {
    AdExpiryUnit.MINUTES: 60,
    AdExpiryUnit.HOURS: 60 * 60,
    AdExpiryUnit.DAYS: 24 * 60 * 60,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def expiry_for(value: int, unit: AdExpiryUnit, *, now: datetime | None = None) -> datetime:
    return (now or _utcnow()) + timedelta(seconds=value * _UNIT_SECONDS[unit])


async def create_ad(session: AsyncSession, payload: AdCreate, *, now: datetime | None = None) -> Ad:
    now = now or _utcnow()
    ad = Ad(
        title=payload.title.strip(),
        poster_image_url=payload.poster_image_url,
        button_label=payload.button_label.strip(),
        target_url=payload.target_url,
        expiry_value=payload.expiry_value,
        expiry_unit=payload.expiry_unit,
        created_at=now,
        expires_at=expiry_for(payload.expiry_value, payload.expiry_unit, now=now),
    )
    session.add(ad)
    await session.commit()
    await session.refresh(ad)
    return ad


async def list_active_ads(session: AsyncSession, *, now: datetime | None = None) -> list[Ad]:
    """Ads that have not expired yet, soonest expiry first."""
    now = now or _utcnow()
    result = await session.execute(select(Ad).order_by(Ad.expires_at.asc(), Ad.id))
    # SQLite drops tzinfo, so expiry is compared in Python.
    return [ad for ad in result.scalars().all() if _as_utc(ad.expires_at) > now]


async def delete_ad(session: AsyncSession, ad_id: str) -> None:
    ad = await session.get(Ad, ad_id)
    if not ad:
        raise ValueError("Ad not found")
    await session.delete(ad)
    await session.commit()

