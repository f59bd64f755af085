"""Draft sink for Telegram.

A draft sink pushes preview text into Telegram's ``sendMessageDraft``
endpoint. The draft stream treats any exception raised by a sink as a
permanent failure of the stream.
"""

from __future__ import annotations

import os
from typing import Any, Awaitable, Optional, Protocol

from telegram import Bot

from draftstream.config.loader import load_config
from draftstream.config.schema import DraftstreamConfig, TelegramConfig

SEND_MESSAGE_DRAFT_METHOD = "sendMessageDraft"


class DraftSink(Protocol):
    """Async callable that writes one draft update."""

    def __call__(
        self,
        chat_id: int,
        draft_id: int,
        text: str,
        options: Optional[dict[str, Any]] = None,
    ) -> Awaitable[Any]: ...


def create_bot_draft_sink(bot: Bot) -> DraftSink:
    """Wrap a python-telegram-bot ``Bot`` as a draft sink.

    Args:
        bot: Initialized Telegram bot

    Returns:
        Sink calling ``sendMessageDraft`` with the given chat, draft and text
    """

    async def send_message_draft(
        chat_id: int,
        draft_id: int,
        text: str,
        options: Optional[dict[str, Any]] = None,
    ) -> Any:
        api_kwargs: dict[str, Any] = {
            "chat_id": chat_id,
            "draft_id": draft_id,
            "text": text,
        }
        if options:
            api_kwargs.update(options)
        return await bot.do_api_request(SEND_MESSAGE_DRAFT_METHOD, api_kwargs=api_kwargs)

    return send_message_draft


def _clean(token: Optional[str]) -> Optional[str]:
    if token and token.strip():
        return token.strip()
    return None


def resolve_bot_token(
    explicit_token: Optional[str],
    telegram: TelegramConfig,
    account_id: Optional[str] = None,
) -> str:
    """Resolve the bot token for an account.

    Order: explicit token, ``accounts.<id>.botToken``, ``botToken``, then the
    ``TELEGRAM_BOT_TOKEN`` environment variable.

    Raises:
        ValueError: If token not found
    """
    account = telegram.accounts.get(account_id) if account_id else None
    token = (
        _clean(explicit_token)
        or _clean(account.botToken if account else None)
        or _clean(telegram.botToken)
        or _clean(os.environ.get("TELEGRAM_BOT_TOKEN"))
    )
    if token:
        return token

    account_msg = f' for account "{account_id}"' if account_id else ""
    raise ValueError(
        f"Telegram bot token missing{account_msg}. "
        "Set channels.telegram.botToken or TELEGRAM_BOT_TOKEN environment variable."
    )


def create_bot_from_config(
    config: Optional[DraftstreamConfig] = None,
    token: Optional[str] = None,
    account_id: Optional[str] = None,
) -> Bot:
    """Build a Telegram ``Bot`` from configuration.

    Args:
        config: Loaded configuration (read from disk if None)
        token: Explicit bot token
        account_id: Optional account ID

    Returns:
        Bot instance (not yet initialized)
    """
    if config is None:
        config = load_config()

    return Bot(token=resolve_bot_token(token, config.channels.telegram, account_id))


__all__ = [
    "DraftSink",
    "SEND_MESSAGE_DRAFT_METHOD",
    "create_bot_draft_sink",
    "resolve_bot_token",
    "create_bot_from_config",
]
