"""Hover an element and give hover-triggered menus or tooltips time to render."""

from __future__ import annotations

from typing import Any

from ..models import ActionResult, ActionTarget
from ..resolve import resolve_element
from .base import finish_action, pause, run_interaction, scroll_into_view

HOVER_SETTLE_MS = 300


async def execute_hover(session: Any, target: ActionTarget) -> ActionResult:
    element = await resolve_element(session, target, "hover")
    settings = session.settings

    async def attempt() -> None:
        await scroll_into_view(element, settings.scroll_into_view_timeout_ms)
        await element.hover(timeout=settings.click_timeout_ms)

    await run_interaction(session, "hover", attempt)
    await pause(session.page, HOVER_SETTLE_MS)
    return await finish_action(session)
