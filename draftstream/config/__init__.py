"""Configuration for draftstream."""

from .loader import get_config_path, invalidate_config_cache, load_config
from .schema import DraftStreamConfig, DraftstreamConfig, TelegramConfig

__all__ = [
    "load_config",
    "invalidate_config_cache",
    "get_config_path",
    "DraftstreamConfig",
    "DraftStreamConfig",
    "TelegramConfig",
]
