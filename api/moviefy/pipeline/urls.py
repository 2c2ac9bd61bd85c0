"""Deterministic download URL templates shared with the file bot."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from moviefy.core.config import settings


def stream_url(api_base: str, content_id: str, name: str) -> str:
    """Direct file URL served by the metadata API's file host."""
    return f"{api_base.rstrip('/')}/dl/{content_id}/{quote(name, safe='')}"


def telegram_file_url(bot_username: str, title_id: str, quality: str) -> str:
    return f"https://t.me/{bot_username}?start=file_{title_id}_{quality}"


def telegram_season_pack_url(bot_username: str, title_id: str, season_number: int, quality: str) -> str:
    return f"https://t.me/{bot_username}?start=file_{title_id}_{season_number}_{quality}"


@dataclass(frozen=True, slots=True)
class LinkTemplates:
    """Base URL and bot handle snapshot used to synthesize links."""
    api_base: str
    bot_username: str

    @classmethod
    def from_settings(cls) -> "LinkTemplates":
        return cls(api_base=settings.metadata_api_base_url, bot_username=settings.telegram_bot_username)

    def stream(self, content_id: str, name: str) -> str:
        return stream_url(self.api_base, content_id, name)

    def telegram_file(self, title_id: str, quality: str) -> str:
        return telegram_file_url(self.bot_username, title_id, quality)

    def season_pack(self, title_id: str, season_number: int, quality: str) -> str:
        return telegram_season_pack_url(self.bot_username, title_id, season_number, quality)
