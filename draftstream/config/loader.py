"""Configuration loader for draftstream.

Loads configuration from a JSON5 file:
- JSON5 parsing (comments, trailing commas, unquoted keys)
- ${ENV_VAR} environment variable substitution
- In-process caching until invalidate_config_cache() is called
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional, Union

import json5

from .schema import DraftstreamConfig

logger = logging.getLogger(__name__)

_cached_config: Optional[DraftstreamConfig] = None

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def _substitute_env_vars(obj: Any) -> Any:
    """Recursively replace ${VAR} with os.environ values (unset vars are left as-is)."""
    if isinstance(obj, str):

        def _replace(m: re.Match) -> str:
            return os.environ.get(m.group(1), m.group(0))

        return _ENV_VAR_RE.sub(_replace, obj)
    if isinstance(obj, dict):
        return {k: _substitute_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_substitute_env_vars(v) for v in obj]
    return obj


def get_config_path() -> Path:
    """Return the first existing config file, or the default location."""
    candidates = [
        Path.cwd() / "draftstream.json",
        Path.cwd() / "draftstream.json5",
        Path.home() / ".draftstream" / "config.json",
        Path.home() / ".draftstream" / "config.json5",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return Path.home() / ".draftstream" / "config.json"


def load_config_raw(path: Path) -> dict[str, Any]:
    """
    Load a config file with JSON5 parsing and env-var substitution.

    Returns the resolved config dict (ready for schema validation).
    """
    obj = json5.loads(path.read_text(encoding="utf-8"))
    obj = _substitute_env_vars(obj)
    return obj if isinstance(obj, dict) else {}


def load_config(
    config_path: Optional[str | Path] = None,
    as_dict: bool = False,
) -> Union[DraftstreamConfig, dict[str, Any]]:
    """Load draftstream configuration.

    Args:
        config_path: Optional path to config file. Supports JSON5.
        as_dict: If True, return dict instead of DraftstreamConfig object.

    Returns:
        Configuration object or dictionary if as_dict=True.
    """
    global _cached_config

    if _cached_config is not None and config_path is None:
        return _cached_config.model_dump() if as_dict else _cached_config

    path = Path(config_path) if config_path else get_config_path()
    config_dict: dict[str, Any] = {}

    if path.exists():
        try:
            config_dict = load_config_raw(path)
        except Exception as exc:
            logger.warning(f"Failed to load config from {path}: {exc}")

    try:
        config_obj = DraftstreamConfig(**config_dict)
    except Exception as exc:
        logger.warning(f"Failed to parse config: {exc}")
        config_obj = DraftstreamConfig()

    _cached_config = config_obj
    return config_obj.model_dump() if as_dict else config_obj


def invalidate_config_cache() -> None:
    """Invalidate the in-process config cache so the next load_config() re-reads disk."""
    global _cached_config
    _cached_config = None
