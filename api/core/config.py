"""
Environment-backed settings.

Every reader falls back to its default on a missing or unparsable value so a
bad variable never prevents startup.
"""

from __future__ import annotations

import os

DEFAULT_MAX_COMPATIBILITY = 5.0
DEFAULT_CROP_SEARCH_LIMIT = 25


def env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def max_compatibility() -> float:
    """
    Upper bound of a companionship score. Non-positive values are ignored.
    """
    value = env_float("COMPANIONSHIP_MAX_SCORE", DEFAULT_MAX_COMPATIBILITY)
    return value if value > 0 else DEFAULT_MAX_COMPATIBILITY


def crop_search_limit() -> int:
    value = env_int("CROP_SEARCH_LIMIT", DEFAULT_CROP_SEARCH_LIMIT)
    return value if value > 0 else DEFAULT_CROP_SEARCH_LIMIT


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()
