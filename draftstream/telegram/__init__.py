"""Telegram draft streaming.

This package provides:
- Throttled, coalescing draft (typing preview) streaming
- A draft sink backed by python-telegram-bot
- Raw API error detection for preview text
"""

from .draft_sanitize import DEFAULT_LEAK_RULES, DraftLeakRule, sanitize_draft_text
from .draft_sink import (
    DraftSink,
    create_bot_draft_sink,
    create_bot_from_config,
    resolve_bot_token,
)
from .draft_stream import (
    DEFAULT_THROTTLE_MS,
    MIN_THROTTLE_MS,
    TELEGRAM_DRAFT_MAX_CHARS,
    DraftStream,
    DraftStreamOptions,
    create_telegram_draft_stream,
)

__all__ = [
    "DraftStream",
    "DraftStreamOptions",
    "create_telegram_draft_stream",
    "DraftSink",
    "create_bot_draft_sink",
    "create_bot_from_config",
    "resolve_bot_token",
    "DraftLeakRule",
    "DEFAULT_LEAK_RULES",
    "sanitize_draft_text",
    "TELEGRAM_DRAFT_MAX_CHARS",
    "DEFAULT_THROTTLE_MS",
    "MIN_THROTTLE_MS",
]
