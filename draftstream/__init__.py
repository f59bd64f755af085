"""
draftstream - stream live-generated replies into Telegram draft previews
"""

__version__ = "0.1.0"

from .telegram.draft_stream import DraftStream, create_telegram_draft_stream

__all__ = ["DraftStream", "create_telegram_draft_stream", "__version__"]
