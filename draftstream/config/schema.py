"""
Configuration schema

Pydantic models for the draftstream config file. Field names follow the
camelCase keys used in the JSON config.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

DRAFT_MAX_CHARS_LIMIT = 4096
DRAFT_MIN_THROTTLE_MS = 50


class DraftStreamConfig(BaseModel):
    """Settings for Telegram draft (typing preview) streaming"""
    throttleMs: int = Field(300, description="Minimum interval between draft requests")
    maxChars: int = Field(DRAFT_MAX_CHARS_LIMIT, description="Stop streaming past this length")

    @field_validator("throttleMs")
    @classmethod
    def floor_throttle(cls, v):
        return max(DRAFT_MIN_THROTTLE_MS, v)

    @field_validator("maxChars")
    @classmethod
    def clamp_max_chars(cls, v):
        if v < 1:
            raise ValueError("maxChars must be positive")
        return min(v, DRAFT_MAX_CHARS_LIMIT)


class TelegramAccountConfig(BaseModel):
    """Per-account Telegram settings"""
    botToken: Optional[str] = None


class TelegramConfig(BaseModel):
    """Telegram channel settings"""
    botToken: Optional[str] = None
    accounts: dict[str, TelegramAccountConfig] = Field(default_factory=dict)
    draftStream: DraftStreamConfig = Field(default_factory=DraftStreamConfig)


class ChannelsConfig(BaseModel):
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)


class DraftstreamConfig(BaseModel):
    """Root configuration"""
    channels: ChannelsConfig = Field(default_factory=ChannelsConfig)
