"""Singleton site settings document."""

from __future__ import annotations

import typing
from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from moviefy.db.base_class import Base
from moviefy.models.media import JSON_COMPATIBLE

GLOBAL_SETTINGS_ID = "global"


class SiteSettings(Base):
    """Key/document row holding admin-editable site configuration."""
    __tablename__ = "site_settings"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=GLOBAL_SETTINGS_ID)
    data: Mapped[dict[str, typing.Any]] = mapped_column(JSON_COMPATIBLE, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
