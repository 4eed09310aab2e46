"""Environment and file driven settings for snapshots and actions."""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .common import (
    DEFAULT_CLICK_TIMEOUT_MS,
    DEFAULT_FOCUS_TIMEOUT_MS,
    DEFAULT_MAX_TEXT_LENGTH,
    DEFAULT_NAVIGATION_TIMEOUT_MS,
    DEFAULT_RETRY_BACKOFF_MS,
    DEFAULT_SCROLL_INTO_VIEW_TIMEOUT_MS,
    DEFAULT_SETTLE_TIMEOUT_MS,
    DEFAULT_WAIT_TIMEOUT_MS,
    MAX_WAIT_TIMEOUT_MS,
    _coerce_bool,
    _parse_bool_env,
    _parse_int_env,
    _split_csv_env,
)
from .errors import ValidationError

VERBOSITY_LEVELS = ("minimal", "normal", "detailed")
_DEFAULT_UPLOAD_BLOCKED_PREFIXES = ("/etc", "/proc", "/sys", "/dev", "/var/run")


def _parse_verbosity_env(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in VERBOSITY_LEVELS:
        return raw
    return default


@dataclass(frozen=True)
class AxsnapSettings:
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH
    default_verbosity: str = "normal"
    default_max_refs: int = 0
    action_retries: int = 1
    retry_backoff_ms: int = DEFAULT_RETRY_BACKOFF_MS
    scroll_into_view_timeout_ms: int = DEFAULT_SCROLL_INTO_VIEW_TIMEOUT_MS
    click_timeout_ms: int = DEFAULT_CLICK_TIMEOUT_MS
    focus_timeout_ms: int = DEFAULT_FOCUS_TIMEOUT_MS
    settle_timeout_ms: int = DEFAULT_SETTLE_TIMEOUT_MS
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    wait_timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS
    max_wait_timeout_ms: int = MAX_WAIT_TIMEOUT_MS
    headless: bool = True
    allowed_domains: tuple[str, ...] = ()
    upload_blocked_prefixes: tuple[str, ...] = _DEFAULT_UPLOAD_BLOCKED_PREFIXES

    @classmethod
    def from_env(cls) -> "AxsnapSettings":
        return cls(
            max_text_length=_parse_int_env("AXSNAP_MAX_TEXT_LENGTH", DEFAULT_MAX_TEXT_LENGTH, 10),
            default_verbosity=_parse_verbosity_env("AXSNAP_SNAPSHOT_VERBOSITY", "normal"),
            default_max_refs=_parse_int_env("AXSNAP_SNAPSHOT_MAX_REFS", 0, 0),
            action_retries=_parse_int_env("AXSNAP_ACTION_RETRIES", 1, 0),
            retry_backoff_ms=_parse_int_env("AXSNAP_RETRY_BACKOFF_MS", DEFAULT_RETRY_BACKOFF_MS, 0),
            scroll_into_view_timeout_ms=_parse_int_env(
                "AXSNAP_SCROLL_INTO_VIEW_TIMEOUT_MS",
                DEFAULT_SCROLL_INTO_VIEW_TIMEOUT_MS,
                100,
            ),
            click_timeout_ms=_parse_int_env("AXSNAP_CLICK_TIMEOUT_MS", DEFAULT_CLICK_TIMEOUT_MS, 100),
            focus_timeout_ms=_parse_int_env("AXSNAP_FOCUS_TIMEOUT_MS", DEFAULT_FOCUS_TIMEOUT_MS, 100),
            settle_timeout_ms=_parse_int_env("AXSNAP_SETTLE_TIMEOUT_MS", DEFAULT_SETTLE_TIMEOUT_MS, 50),
            navigation_timeout_ms=_parse_int_env(
                "AXSNAP_NAVIGATION_TIMEOUT_MS",
                DEFAULT_NAVIGATION_TIMEOUT_MS,
                1000,
            ),
            wait_timeout_ms=_parse_int_env("AXSNAP_WAIT_TIMEOUT_MS", DEFAULT_WAIT_TIMEOUT_MS, 100),
            max_wait_timeout_ms=_parse_int_env("AXSNAP_MAX_WAIT_TIMEOUT_MS", MAX_WAIT_TIMEOUT_MS, 100),
            headless=_parse_bool_env("AXSNAP_HEADLESS", True),
            allowed_domains=_split_csv_env("AXSNAP_ALLOWED_DOMAINS"),
            upload_blocked_prefixes=_split_csv_env(
                "AXSNAP_UPLOAD_BLOCKED_PREFIXES",
                _DEFAULT_UPLOAD_BLOCKED_PREFIXES,
            ),
        )

    def merged(self, overrides: Mapping[str, Any]) -> "AxsnapSettings":
        """Return a copy with the known keys of ``overrides`` applied and coerced."""
        known = {f.name: f for f in dataclasses.fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in (overrides or {}).items():
            clean_key = str(key).strip()
            if clean_key not in known:
                raise ValidationError(f"Unknown axsnap setting: {clean_key}")
            changes[clean_key] = _coerce_setting(clean_key, getattr(self, clean_key), value)
        return dataclasses.replace(self, **changes)


def _coerce_setting(key: str, current: Any, value: Any) -> Any:
    if isinstance(current, bool):
        return _coerce_bool(value)
    if isinstance(current, int):
        try:
            parsed = int(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Setting {key} must be an integer") from exc
        if parsed < 0:
            raise ValidationError(f"Setting {key} must not be negative")
        return parsed
    if isinstance(current, tuple):
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            raise ValidationError(f"Setting {key} must be a list of strings")
        return tuple(str(item).strip().lower() for item in value if str(item).strip())
    text = str(value).strip().lower()
    if key == "default_verbosity" and text not in VERBOSITY_LEVELS:
        allowed = ", ".join(VERBOSITY_LEVELS)
        raise ValidationError(f"Setting {key} must be one of: {allowed}")
    return text


def _load_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ValidationError(f"Config file not found: {path}")
    if path.suffix.lower() in {".yaml", ".yml"}:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    else:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(loaded, dict):
        raise ValidationError(f"Config file must contain a mapping: {path}")
    # Accept either a bare mapping or one nested under an "axsnap" block.
    nested = loaded.get("axsnap")
    return nested if isinstance(nested, dict) else loaded


def load_settings(path: Optional[Union[str, Path]] = None) -> AxsnapSettings:
    settings = AxsnapSettings.from_env()
    if path is None:
        return settings
    return settings.merged(_load_config(Path(path)))


_settings: Optional[AxsnapSettings] = None


def get_settings() -> AxsnapSettings:
    global _settings
    if _settings is None:
        _settings = AxsnapSettings.from_env()
    return _settings


def set_settings(settings: Optional[AxsnapSettings]) -> None:
    global _settings
    _settings = settings
