"""Leak detection for draft previews.

Raw transport errors sometimes surface as reply text from an earlier stage of
the pipeline. Before such text reaches a typing preview it is swapped for a
fixed user-facing message. This is a last-resort net; errors should be
formatted before they ever reach the draft stream.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from draftstream.diagnostics import Diagnostics

logger = logging.getLogger(__name__)

GENERIC_ERROR_FALLBACK = (
    "An error occurred. Please try again or use /new to start a fresh session."
)
ROLE_ORDERING_FALLBACK = (
    "Message ordering conflict - please try again. "
    "If this persists, use /new to start a fresh session."
)


@dataclass(frozen=True)
class DraftLeakRule:
    """A known leak signature and the message shown in its place."""

    name: str
    pattern: re.Pattern
    fallback: str
    warn: bool = False


DEFAULT_LEAK_RULES: tuple[DraftLeakRule, ...] = (
    # e.g. "400 Incorrect role information"
    DraftLeakRule(
        name="http_status",
        pattern=re.compile(r"^\d{3}\s+"),
        fallback=GENERIC_ERROR_FALLBACK,
        warn=True,
    ),
    DraftLeakRule(
        name="role_ordering",
        pattern=re.compile(r"incorrect role information|roles must alternate", re.IGNORECASE),
        fallback=ROLE_ORDERING_FALLBACK,
    ),
)


def match_leak_rule(
    text: str, rules: Sequence[DraftLeakRule] = DEFAULT_LEAK_RULES
) -> Optional[DraftLeakRule]:
    """Return the first rule whose pattern matches the stripped text."""
    trimmed = text.strip()
    for rule in rules:
        if rule.pattern.search(trimmed):
            return rule
    return None


def sanitize_draft_text(
    text: str,
    rules: Sequence[DraftLeakRule] = DEFAULT_LEAK_RULES,
    diagnostics: Optional[Diagnostics] = None,
) -> str:
    """Replace leaked raw API errors with a user-facing fallback.

    Args:
        text: Draft text about to be sent
        rules: Leak signatures, checked in order
        diagnostics: Where to report blocked text (module logger if None)

    Returns:
        The fallback message of the first matching rule, else ``text``
    """
    rule = match_leak_rule(text, rules)
    if rule is None:
        return text

    if rule.warn:
        message = f"[telegram/draft] Blocked raw API error from draft preview: {text.strip()[:100]}"
        if diagnostics is not None:
            diagnostics.warning(message)
        else:
            logger.warning(message)
    return rule.fallback


__all__ = [
    "DraftLeakRule",
    "DEFAULT_LEAK_RULES",
    "GENERIC_ERROR_FALLBACK",
    "ROLE_ORDERING_FALLBACK",
    "match_leak_rule",
    "sanitize_draft_text",
]
