"""Input sanitisation for selectors, URLs and display text."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from .errors import ValidationError

_BLOCKED_PROTOCOLS = ("javascript:", "data:", "file:", "vbscript:")
_SELECTOR_PATTERN = re.compile(r"""[a-zA-Z0-9\s\-_.*#:\[\]()='"~^$|,>+@\\/]+""")


def sanitize_url(url: str) -> str:
    trimmed = (url or "").strip()
    if not trimmed:
        raise ValidationError("URL must not be empty")

    lowered = trimmed.lower()
    for protocol in _BLOCKED_PROTOCOLS:
        if lowered.startswith(protocol):
            raise ValidationError(f"Blocked URL protocol: {protocol}")

    try:
        parsed = urlsplit(trimmed)
    except ValueError as exc:
        raise ValidationError(f"Invalid URL: {trimmed}") from exc

    scheme = (parsed.scheme or "").lower()
    if not scheme or not parsed.netloc:
        raise ValidationError(f"Invalid URL: {trimmed}")
    if scheme not in {"http", "https"}:
        raise ValidationError(f"Only http and https URLs are allowed, got: {scheme}:")
    if not parsed.path:
        # Match browser URL normalisation: "https://host" -> "https://host/".
        parsed = parsed._replace(path="/")
    return parsed._replace(scheme=scheme, netloc=parsed.netloc.lower()).geturl()


def sanitize_selector(selector: str) -> str:
    """Reject selectors containing characters outside a conservative CSS subset."""
    trimmed = (selector or "").strip()
    if not trimmed:
        raise ValidationError("CSS selector must not be empty")
    if not _SELECTOR_PATTERN.fullmatch(trimmed):
        raise ValidationError(f"Invalid CSS selector: {trimmed}")
    return trimmed


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[: max(0, max_length - 3)]}..."
