"""
Accessibility snapshot capture.

A snapshot is taken in two rounds against the live page:

1. One ``page.evaluate`` call runs the in-page classifier, which filters hidden
   nodes, computes role/name/value/state for every interactive or meaningful
   element, and stamps each survivor with a ``data-axsnap-ref="rN"`` marker.
2. Back in Python, every stamped ref is re-queried through the marker to bind a
   live ``ElementHandle``. Elements that vanished in between are skipped.

The result is a serialisable :class:`PageSnapshot` plus a ref -> handle map the
owning session installs as its ref table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from .common import PASSWORD_MASK, REF_MARKER_ATTR, _coerce_bool, _optional_bool, _safe_text
from .errors import ValidationError
from .logging_utils import _log_event
from .models import PageSnapshot, RefElement, Verbosity
from .sanitize import sanitize_selector, truncate_text
from .settings import AxsnapSettings, get_settings
from .snapshot_script import _CLASSIFY_JS, INTERACTIVE_SELECTORS, MEANINGFUL_SELECTORS

logger = logging.getLogger(__name__)


@dataclass
class SnapshotCapture:
    snapshot: PageSnapshot
    ref_map: Dict[str, Any] = field(default_factory=dict)


def _normalize_verbosity(value: Union[str, Verbosity, None], default: str) -> Verbosity:
    if value is None:
        value = default
    if isinstance(value, Verbosity):
        return value
    try:
        return Verbosity(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(level.value for level in Verbosity)
        raise ValidationError(f"Invalid verbosity {value!r}; expected one of: {allowed}") from exc


def _normalize_max_refs(value: Optional[int], default: int) -> int:
    if value is None:
        return max(0, int(default))
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"max_refs must be an integer, got {value!r}") from exc
    if parsed < 0:
        raise ValidationError("max_refs must not be negative")
    return parsed


def _project_element(raw: Dict[str, Any], verbosity: Verbosity, max_text_length: int) -> RefElement:
    element = RefElement(
        ref=_safe_text(raw.get("ref")),
        role=_safe_text(raw.get("role")),
        name=truncate_text(_safe_text(raw.get("name")), max_text_length),
    )
    if verbosity is Verbosity.MINIMAL:
        return element

    value = raw.get("value")
    if value is not None:
        element.value = truncate_text(_safe_text(value), max_text_length)
    if _coerce_bool(raw.get("disabled")):
        element.disabled = True
    element.checked = _optional_bool(raw.get("checked"))
    element.expanded = _optional_bool(raw.get("expanded"))
    options = raw.get("options")
    if isinstance(options, list) and options:
        element.options = [_safe_text(option) for option in options]

    if verbosity is Verbosity.DETAILED:
        description = _safe_text(raw.get("description")).strip()
        if description:
            element.description = description
    return element


async def _read_title(page: Any) -> str:
    try:
        return _safe_text(await page.title())
    except Exception as exc:
        _log_event(logger, level=logging.DEBUG, event="snapshot_title_failed", error=exc)
        return ""


async def _classify(
    page: Any,
    *,
    scope: Optional[str],
    max_refs: int,
    max_text_length: int,
) -> List[Dict[str, Any]]:
    raw = await page.evaluate(
        _CLASSIFY_JS,
        {
            "interactiveSel": INTERACTIVE_SELECTORS,
            "meaningfulSel": MEANINGFUL_SELECTORS,
            "refAttr": REF_MARKER_ATTR,
            "maxLen": max_text_length,
            "scopeSelector": scope or "",
            "maxRefs": max_refs,
            "passwordMask": PASSWORD_MASK,
        },
    )
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, dict) and _safe_text(item.get("ref"))]


def ref_marker_selector(ref: str) -> str:
    return f'[{REF_MARKER_ATTR}="{ref}"]'


async def bind_handles(page: Any, refs: Iterable[str]) -> Dict[str, Any]:
    """Re-query each stamped ref and bind whatever is still in the document."""
    ref_map: Dict[str, Any] = {}
    for ref in refs:
        try:
            handle = await page.query_selector(ref_marker_selector(ref))
        except Exception as exc:
            _log_event(logger, level=logging.DEBUG, event="ref_bind_failed", ref=ref, error=exc)
            continue
        if handle is None:
            _log_event(logger, level=logging.DEBUG, event="ref_bind_missing", ref=ref)
            continue
        ref_map[ref] = handle
    return ref_map


async def take_snapshot(
    page: Any,
    *,
    scope: Optional[str] = None,
    verbosity: Union[str, Verbosity, None] = None,
    max_refs: Optional[int] = None,
    settings: Optional[AxsnapSettings] = None,
) -> SnapshotCapture:
    settings = settings or get_settings()
    level = _normalize_verbosity(verbosity, settings.default_verbosity)
    limit = _normalize_max_refs(max_refs, settings.default_max_refs)
    clean_scope = sanitize_selector(scope) if scope else None

    url = _safe_text(getattr(page, "url", ""))
    title = await _read_title(page)

    raw_elements = await _classify(
        page,
        scope=clean_scope,
        max_refs=limit,
        max_text_length=settings.max_text_length,
    )
    refs = [_project_element(raw, level, settings.max_text_length) for raw in raw_elements]
    ref_map = await bind_handles(page, [element.ref for element in refs])

    _log_event(
        logger,
        level=logging.DEBUG,
        event="snapshot_captured",
        url=url,
        element_count=len(refs),
        bound_count=len(ref_map),
        verbosity=level.value,
        scope=clean_scope,
    )
    return SnapshotCapture(snapshot=PageSnapshot(url=url, title=title, refs=refs), ref_map=ref_map)


def format_snapshot(snapshot: PageSnapshot) -> str:
    """Render a lossy, human-readable view of a snapshot, one line per element."""
    lines: List[str] = [f"Page: {snapshot.title}", f"URL:  {snapshot.url}", ""]
    if not snapshot.refs:
        lines.append("(no interactive elements found)")
        return "\n".join(lines)

    for element in snapshot.refs:
        line = f"[{element.ref}] {element.role}"
        if element.name:
            line += f' "{element.name}"'
        if element.value is not None:
            line += f' value="{element.value}"'
        if element.checked is not None:
            line += f" checked={str(element.checked).lower()}"
        if element.disabled:
            line += " (disabled)"
        if element.expanded is not None:
            line += f" expanded={str(element.expanded).lower()}"
        if element.options:
            rendered = ", ".join(f'"{option}"' for option in element.options)
            line += f" options=[{rendered}]"
        if element.description:
            line += f" -- {element.description}"
        lines.append(line)
    return "\n".join(lines)
