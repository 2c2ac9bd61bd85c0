"""Source routing by identifier shape.

Invariants:
- An ID made only of ASCII digits belongs to the metadata API; anything else
  is a curated post ID. Every entry point that accepts an ID routes through
  ``classify``.
"""

from __future__ import annotations

import re

from moviefy.models.media import SourceKind

_EXTERNAL_ID_RE = re.compile(r"[0-9]+")


class SourceRouter:
    """Classify title identifiers by the source that owns them."""

    def classify(self, title_id: object) -> SourceKind:
        if isinstance(title_id, int) and not isinstance(title_id, bool):
            return SourceKind.EXTERNAL if title_id >= 0 else SourceKind.CURATED
        if isinstance(title_id, str) and _EXTERNAL_ID_RE.fullmatch(title_id):
            return SourceKind.EXTERNAL
        return SourceKind.CURATED


source_router = SourceRouter()


def classify(title_id: object) -> SourceKind:
    return source_router.classify(title_id)
