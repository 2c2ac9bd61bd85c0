"""Shared media enums used by stored posts and normalized catalog records."""

from __future__ import annotations

import enum

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

JSON_COMPATIBLE = JSON().with_variant(JSONB, "postgresql")


class MediaType(str, enum.Enum):
    """Catalog media categories."""
    MOVIE = "movie"
    TV = "tv"


class SourceKind(str, enum.Enum):
    """Origin of a catalog record; derived, never stored."""
    CURATED = "curated"
    EXTERNAL = "external"


class LinkKind(str, enum.Enum):
    """How a download link is delivered."""
    DIRECT = "direct"
    TELEGRAM = "telegram"
