"""
Diagnostics port for draft streaming.

Components report side-channel diagnostics through a small port with two
capabilities, ``info`` and ``warning``. A missing observer is represented by
``NullDiagnostics`` so callers never have to check for ``None``.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Diagnostics(Protocol):
    """Side-channel diagnostics sink."""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...


class NullDiagnostics:
    """Discards every message."""

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass


class LoggerDiagnostics:
    """Forwards diagnostics to a standard library logger."""

    def __init__(self, target: Optional[logging.Logger] = None):
        self._logger = target or logger

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)


class CallbackDiagnostics:
    """
    Adapts plain ``log`` / ``warn`` callables to the diagnostics port.

    Either callable may be omitted; the matching capability becomes a no-op.
    """

    def __init__(
        self,
        log: Optional[Callable[[str], None]] = None,
        warn: Optional[Callable[[str], None]] = None,
    ):
        self._log = log
        self._warn = warn

    def info(self, message: str) -> None:
        if self._log is not None:
            self._log(message)

    def warning(self, message: str) -> None:
        if self._warn is not None:
            self._warn(message)


def resolve_diagnostics(
    diagnostics: Optional[Diagnostics] = None,
    log: Optional[Callable[[str], None]] = None,
    warn: Optional[Callable[[str], None]] = None,
    fallback: Optional[Diagnostics] = None,
) -> Diagnostics:
    """Pick the diagnostics port for a component.

    Args:
        diagnostics: Explicit port (wins over callables)
        log: Optional info callback
        warn: Optional warning callback
        fallback: Port used when no observer is given (NullDiagnostics if None)

    Returns:
        A diagnostics port, never None
    """
    if diagnostics is not None:
        return diagnostics
    if log is not None or warn is not None:
        return CallbackDiagnostics(log=log, warn=warn)
    if fallback is not None:
        return fallback
    return NullDiagnostics()


__all__ = [
    "Diagnostics",
    "NullDiagnostics",
    "LoggerDiagnostics",
    "CallbackDiagnostics",
    "resolve_diagnostics",
]
