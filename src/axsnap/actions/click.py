"""Click an element, falling back to a forced click when actionability checks stall."""

from __future__ import annotations

import logging
from typing import Any

from ..logging_utils import _log_event
from ..models import ActionResult, ActionTarget
from ..resolve import resolve_element
from .base import finish_action, run_interaction, scroll_into_view, settle

logger = logging.getLogger(__name__)


async def _click_with_fallback(element: Any, timeout_ms: int) -> None:
    try:
        await element.click(timeout=timeout_ms)
    except Exception as exc:
        # Forced clicks skip the visible/stable/enabled actionability checks.
        _log_event(logger, level=logging.DEBUG, event="click_force_fallback", error=exc)
        await element.click(force=True, timeout=timeout_ms)


async def execute_click(session: Any, target: ActionTarget) -> ActionResult:
    element = await resolve_element(session, target, "click")
    settings = session.settings

    async def attempt() -> None:
        await scroll_into_view(element, settings.scroll_into_view_timeout_ms)
        await _click_with_fallback(element, settings.click_timeout_ms)

    await run_interaction(session, "click", attempt)
    await settle(session.page, settings.settle_timeout_ms)
    return await finish_action(session)
