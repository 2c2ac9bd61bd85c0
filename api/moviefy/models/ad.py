"""Time-limited promotional banners."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from moviefy.db.base_class import Base


class AdExpiryUnit(str, enum.Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"


class Ad(Base):
    """Banner shown between catalog sections until it expires."""
    __tablename__ = "ads"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    poster_image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    button_label: Mapped[str] = mapped_column(String(100), nullable=False)
    target_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    expiry_value: Mapped[int] = mapped_column(Integer, nullable=False)
    expiry_unit: Mapped[AdExpiryUnit] = mapped_column(
        Enum(AdExpiryUnit, name="ad_expiry_unit", values_callable=lambda enum_cls: [e.value for e in enum_cls]),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
