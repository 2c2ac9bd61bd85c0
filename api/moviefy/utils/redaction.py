"""Masking of credentials that upstream errors tend to echo back.

Shortener endpoints carry their key as ``?api=...`` and Telegram bot URLs
embed the bot token in the path, so both end up inside ``httpx`` error text.
"""

from __future__ import annotations

import re

_MASK = "***"

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?i)([a-z][a-z0-9+.-]*://)[^@/\s]+@"), rf"\1{_MASK}@"),
    (
        re.compile(r"(?i)\b(api|api_key|apikey|key|token|access_token|secret|password)=[^&\s\"']+"),
        rf"\1={_MASK}",
    ),
    (re.compile(r"(?i)(/bot)\d+:[A-Za-z0-9_-]+"), rf"\1{_MASK}"),
    (re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._~+/-]+=*"), rf"\1{_MASK}"),
)


def redact_secrets(text: str) -> str:
    """Return ``text`` with userinfo, key-bearing query params and tokens masked."""
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    return text
