"""Scroll the viewport, or bring a specific element into view."""

from __future__ import annotations

from typing import Any, Optional

from ..errors import ValidationError
from ..models import ActionResult, ActionTarget
from ..resolve import resolve_element
from .base import finish_action, pause, run_interaction

SCROLL_STEP_PX = 500
SCROLL_SETTLE_MS = 400

_DIRECTIONS = {
    "up": (0, -SCROLL_STEP_PX),
    "down": (0, SCROLL_STEP_PX),
    "left": (-SCROLL_STEP_PX, 0),
    "right": (SCROLL_STEP_PX, 0),
}

_SCROLL_BY_JS = "([dx, dy]) => window.scrollBy(dx, dy)"


def _normalize_direction(direction: Optional[str]) -> str:
    clean = (direction or "down").strip().lower()
    if clean not in _DIRECTIONS:
        allowed = ", ".join(_DIRECTIONS)
        raise ValidationError(f"Invalid scroll direction {direction!r}; expected one of: {allowed}")
    return clean


async def execute_scroll(
    session: Any,
    target: Optional[ActionTarget] = None,
    direction: Optional[str] = None,
) -> ActionResult:
    page = session.page
    settings = session.settings

    if target is not None and not target.is_empty:
        element = await resolve_element(session, target, "scroll")

        async def attempt() -> None:
            await element.scroll_into_view_if_needed(timeout=settings.scroll_into_view_timeout_ms)

    else:
        dx, dy = _DIRECTIONS[_normalize_direction(direction)]

        async def attempt() -> None:
            await page.evaluate(_SCROLL_BY_JS, [dx, dy])

    await run_interaction(session, "scroll", attempt)
    await pause(page, SCROLL_SETTLE_MS)
    return await finish_action(session)
