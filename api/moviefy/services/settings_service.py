"""Admin-editable site settings stored as a single document."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from moviefy.models.site_settings import GLOBAL_SETTINGS_ID, SiteSettings
from moviefy.pipeline.link_resolver import ShortenerConfig
from moviefy.schema.catalog import SiteSettingsPublic, SiteSettingsRead, SiteSettingsUpdate

logger = logging.getLogger("moviefy.services.settings")


async def get_settings_document(session: AsyncSession) -> dict[str, Any]:
    row = await session.get(SiteSettings, GLOBAL_SETTINGS_ID)
    return dict(row.data or {}) if row else {}


async def get_site_settings(session: AsyncSession) -> SiteSettingsRead:
    return SiteSettingsRead.model_validate(await get_settings_document(session))


async def get_public_settings(session: AsyncSession) -> SiteSettingsPublic:
    return SiteSettingsPublic.model_validate(await get_settings_document(session))


async def update_site_settings(session: AsyncSession, payload: SiteSettingsUpdate) -> SiteSettingsRead:
    """Merge the provided fields into the stored document."""
    row = await session.get(SiteSettings, GLOBAL_SETTINGS_ID)
    if not row:
        row = SiteSettings(id=GLOBAL_SETTINGS_ID, data={})
        session.add(row)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("enable_url_shortener") is None:
        changes.pop("enable_url_shortener", None)
    merged = dict(row.data or {})
    merged.update(changes)
    row.data = merged
    await session.commit()
    logger.info("Updated site settings", extra={"fields": sorted(payload.model_fields_set)})
    return SiteSettingsRead.model_validate(merged)


async def get_shortener_config(session: AsyncSession) -> ShortenerConfig:
    """Snapshot the shortener settings; an unreadable store disables shortening."""
    try:
        data = await get_settings_document(session)
    except SQLAlchemyError as exc:
        logger.warning("Site settings unavailable, shortener disabled: %s", exc)
        return ShortenerConfig()
    return ShortenerConfig.from_document(data)
