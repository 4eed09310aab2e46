"""Shared constants and coercion helpers for axsnap modules."""

from __future__ import annotations

import os
from typing import Any, Optional


DEFAULT_MAX_TEXT_LENGTH = 100
DEFAULT_RETRY_BACKOFF_MS = 200
DEFAULT_SCROLL_INTO_VIEW_TIMEOUT_MS = 2_000
DEFAULT_CLICK_TIMEOUT_MS = 3_000
DEFAULT_FOCUS_TIMEOUT_MS = 5_000
DEFAULT_SETTLE_TIMEOUT_MS = 3_000
DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000
DEFAULT_WAIT_TIMEOUT_MS = 5_000
MAX_WAIT_TIMEOUT_MS = 30_000

REF_MARKER_ATTR = "data-axsnap-ref"
PASSWORD_MASK = "••••"


def _safe_text(value: Any) -> str:
    try:
        return str(value) if value is not None else ""
    except Exception:
        return ""


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = _safe_text(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off", ""}:
        return False
    return bool(value)


def _optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return _coerce_bool(value)


def _normalize_timeout(timeout_ms: Optional[int], default: int) -> int:
    if timeout_ms is None:
        return default
    try:
        parsed = int(timeout_ms)
    except Exception:
        return default
    return max(1, parsed)


def _parse_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    text = raw.strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return max(minimum, int(default))
    try:
        parsed = int(raw.strip())
    except Exception:
        return max(minimum, int(default))
    return max(minimum, parsed)


def _split_csv_env(name: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    values = []
    for token in raw.split(","):
        item = token.strip()
        if item:
            values.append(item.lower())
    return tuple(values)
