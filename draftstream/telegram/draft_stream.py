"""Draft streaming for Telegram.

Pushes a live-generated reply into Telegram's draft (typing preview) channel
while it is being written. Updates are coalesced: only the latest full text is
kept, at most one request is in flight, and requests start no closer together
than the throttle interval. Oversize drafts and API failures stop the stream
for good.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from draftstream.diagnostics import Diagnostics, LoggerDiagnostics, resolve_diagnostics

from .draft_sanitize import DEFAULT_LEAK_RULES, DraftLeakRule, sanitize_draft_text
from .draft_sink import DraftSink, create_bot_draft_sink

if TYPE_CHECKING:
    from telegram import Bot

    from draftstream.config.schema import DraftStreamConfig

logger = logging.getLogger(__name__)

TELEGRAM_DRAFT_MAX_CHARS = 4096
DEFAULT_THROTTLE_MS = 300
MIN_THROTTLE_MS = 50


def normalize_draft_id(raw: Any) -> int:
    """Normalize a draft ID to a positive integer.

    Non-finite values and zero map to 1; fractions are truncated and the sign
    is dropped.
    """
    if isinstance(raw, float) and not math.isfinite(raw):
        return 1
    value = int(raw)
    return 1 if value == 0 else abs(value)


@dataclass(frozen=True)
class DraftStreamOptions:
    """Normalized, immutable settings of one draft stream."""

    chat_id: int
    draft_id: int
    max_chars: int = TELEGRAM_DRAFT_MAX_CHARS
    throttle_ms: int = DEFAULT_THROTTLE_MS
    message_thread_id: Optional[int] = None

    @classmethod
    def build(
        cls,
        chat_id: int,
        draft_id: Any,
        max_chars: Optional[int] = None,
        throttle_ms: Optional[int] = None,
        message_thread_id: Optional[float] = None,
    ) -> "DraftStreamOptions":
        """Clamp and normalize raw settings."""
        thread_id = None
        if isinstance(message_thread_id, (int, float)) and not isinstance(message_thread_id, bool):
            if not isinstance(message_thread_id, float) or math.isfinite(message_thread_id):
                thread_id = int(message_thread_id)

        return cls(
            chat_id=chat_id,
            draft_id=normalize_draft_id(draft_id),
            max_chars=min(
                max_chars if max_chars is not None else TELEGRAM_DRAFT_MAX_CHARS,
                TELEGRAM_DRAFT_MAX_CHARS,
            ),
            throttle_ms=max(
                MIN_THROTTLE_MS,
                throttle_ms if throttle_ms is not None else DEFAULT_THROTTLE_MS,
            ),
            message_thread_id=thread_id,
        )

    @property
    def thread_options(self) -> Optional[dict[str, int]]:
        if self.message_thread_id is None:
            return None
        return {"message_thread_id": self.message_thread_id}


class DraftStream:
    """Coalescing, throttled writer for a Telegram draft preview.

    Usage:
        stream = DraftStream(sink, chat_id=123, draft_id=1)

        async for text in reply_so_far():
            stream.update(text)

        await stream.flush()

    ``update`` must be called from inside a running event loop.
    """

    def __init__(
        self,
        sink: DraftSink,
        chat_id: int,
        draft_id: Any,
        *,
        max_chars: Optional[int] = None,
        throttle_ms: Optional[int] = None,
        message_thread_id: Optional[int] = None,
        diagnostics: Optional[Diagnostics] = None,
        log: Optional[Callable[[str], None]] = None,
        warn: Optional[Callable[[str], None]] = None,
        leak_rules: Sequence[DraftLeakRule] = DEFAULT_LEAK_RULES,
    ):
        """Initialize draft stream.

        Args:
            sink: Async callable performing the draft API request
            chat_id: Chat ID
            draft_id: Draft ID (normalized to a positive integer)
            max_chars: Maximum draft length (capped at 4096)
            throttle_ms: Minimum interval between requests (floored at 50)
            message_thread_id: Optional forum topic to route the draft to
            diagnostics: Diagnostics port (wins over log/warn)
            log: Optional info callback
            warn: Optional warning callback
            leak_rules: Raw-error signatures replaced before sending
        """
        self.options = DraftStreamOptions.build(
            chat_id,
            draft_id,
            max_chars=max_chars,
            throttle_ms=throttle_ms,
            message_thread_id=message_thread_id,
        )
        self._sink = sink
        self._diagnostics = resolve_diagnostics(
            diagnostics, log=log, warn=warn, fallback=LoggerDiagnostics(logger)
        )
        self._leak_rules = tuple(leak_rules)

        self._pending_text = ""
        self._last_sent_text = ""
        self._last_sent_at: Optional[float] = None
        self._in_flight = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._stopped = False

        # Strong references to internally started flushes
        self._tasks: set[asyncio.Task] = set()
        self._starting: Optional[asyncio.Task] = None

        self._diagnostics.info(
            f"telegram draft stream ready (draftId={self.options.draft_id}, "
            f"maxChars={self.options.max_chars}, throttleMs={self.options.throttle_ms})"
        )

    @property
    def stopped(self) -> bool:
        return self._stopped

    def update(self, text: str) -> None:
        """Replace the pending draft with the latest full text.

        Args:
            text: Full reply text so far (not a delta)
        """
        if self._stopped:
            return

        self._pending_text = text

        # Drained by the in-flight flush once the request completes
        if self._in_flight:
            return

        # A drain was already started and has not taken the buffer yet
        if self._starting is not None and not self._starting.done():
            return

        if self._timer is None and self._throttle_elapsed():
            self._start_flush()
            return

        self._schedule()

    async def flush(self) -> None:
        """Send the pending draft now.

        Cancels any pending timer. If a request is in flight, the pending text
        is drained after it completes instead. Failures are not retried.
        """
        if self._stopped:
            return

        self._cancel_timer()

        if self._in_flight:
            return

        text = self._pending_text
        self._pending_text = ""
        if not text.strip():
            if self._pending_text:
                self._schedule()
            return

        self._in_flight = True
        try:
            await self._send_draft(text)
        finally:
            self._in_flight = False

        if self._pending_text:
            self._schedule()

    def stop(self) -> None:
        """Stop the draft stream. Idempotent; an in-flight request is left to finish."""
        self._stopped = True
        self._pending_text = ""
        self._cancel_timer()

    async def _send_draft(self, text: str) -> None:
        if self._stopped:
            return

        trimmed = text.rstrip()
        if not trimmed:
            return

        max_chars = self.options.max_chars
        if len(trimmed) > max_chars:
            # Oversize drafts would keep failing against the API limit
            self._stopped = True
            self._diagnostics.warning(
                f"telegram draft stream stopped (draft length {len(trimmed)} > {max_chars})"
            )
            return

        sanitized = sanitize_draft_text(trimmed, self._leak_rules, self._diagnostics)
        if sanitized == self._last_sent_text:
            return

        self._last_sent_text = sanitized
        self._last_sent_at = asyncio.get_running_loop().time()
        try:
            await self._sink(
                self.options.chat_id,
                self.options.draft_id,
                sanitized,
                self.options.thread_options,
            )
        except Exception as e:
            self._stopped = True
            self._pending_text = ""
            self._cancel_timer()
            self._diagnostics.warning(
                f"telegram draft stream failed: {str(e) or e.__class__.__name__}"
            )

    def _throttle_elapsed(self) -> bool:
        if self._last_sent_at is None:
            return True
        elapsed = asyncio.get_running_loop().time() - self._last_sent_at
        return elapsed * 1000 >= self.options.throttle_ms

    def _schedule(self) -> None:
        if self._timer is not None or self._stopped:
            return

        loop = asyncio.get_running_loop()
        delay = 0.0
        if self._last_sent_at is not None:
            elapsed = loop.time() - self._last_sent_at
            delay = max(0.0, self.options.throttle_ms / 1000 - elapsed)
        self._timer = loop.call_later(delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        self._start_flush()

    def _start_flush(self) -> None:
        task = asyncio.get_running_loop().create_task(self.flush())
        self._starting = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


def create_telegram_draft_stream(
    bot: "Bot",
    chat_id: int,
    draft_id: Any,
    max_chars: Optional[int] = None,
    throttle_ms: Optional[int] = None,
    message_thread_id: Optional[int] = None,
    config: Optional["DraftStreamConfig"] = None,
    log: Optional[Callable[[str], None]] = None,
    warn: Optional[Callable[[str], None]] = None,
) -> DraftStream:
    """Create a draft stream writing through a Telegram bot.

    Args:
        bot: Bot instance
        chat_id: Chat ID
        draft_id: Draft ID
        max_chars: Max characters (optional, overrides config)
        throttle_ms: Throttle ms (optional, overrides config)
        message_thread_id: Forum topic ID (optional)
        config: Draft stream settings from the loaded configuration
        log: Optional info callback
        warn: Optional warning callback

    Returns:
        Draft stream instance
    """
    if config is not None:
        if max_chars is None:
            max_chars = config.maxChars
        if throttle_ms is None:
            throttle_ms = config.throttleMs

    return DraftStream(
        create_bot_draft_sink(bot),
        chat_id,
        draft_id,
        max_chars=max_chars,
        throttle_ms=throttle_ms,
        message_thread_id=message_thread_id,
        log=log,
        warn=warn,
    )


__all__ = [
    "TELEGRAM_DRAFT_MAX_CHARS",
    "DEFAULT_THROTTLE_MS",
    "MIN_THROTTLE_MS",
    "DraftStream",
    "DraftStreamOptions",
    "normalize_draft_id",
    "create_telegram_draft_stream",
]
