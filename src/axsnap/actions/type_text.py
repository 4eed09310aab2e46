"""Replace the text of an input, textarea or contenteditable region."""

from __future__ import annotations

import logging
from typing import Any

from ..logging_utils import _log_event
from ..models import ActionResult, ActionTarget
from ..resolve import resolve_element
from .base import finish_action, run_interaction, scroll_into_view

logger = logging.getLogger(__name__)

_IS_CONTENT_EDITABLE_JS = "(el) => Boolean(el.isContentEditable)"
_SELECT_NODE_CONTENTS_JS = """
(el) => {
  const range = document.createRange();
  range.selectNodeContents(el);
  const selection = window.getSelection();
  if (selection) {
    selection.removeAllRanges();
    selection.addRange(range);
  }
}
"""


async def _replace_editable_text(page: Any, element: Any, value: str) -> None:
    await element.evaluate(_SELECT_NODE_CONTENTS_JS)
    await page.keyboard.press("Delete")
    await page.keyboard.type(value)


async def _replace_field_text(page: Any, element: Any, value: str, timeout_ms: int) -> None:
    try:
        await element.fill(value, timeout=timeout_ms)
        return
    except Exception as exc:
        _log_event(logger, level=logging.WARNING, event="fill_fallback", error=exc)
    # Triple-click selects the current field text.
    await element.click(click_count=3, timeout=timeout_ms)
    await page.keyboard.press("Delete")
    await page.keyboard.type(value)


async def execute_type(session: Any, target: ActionTarget, value: str) -> ActionResult:
    element = await resolve_element(session, target, "type")
    settings = session.settings
    page = session.page

    async def attempt() -> None:
        await scroll_into_view(element, settings.scroll_into_view_timeout_ms)
        await element.click(timeout=settings.focus_timeout_ms)
        if await element.evaluate(_IS_CONTENT_EDITABLE_JS):
            await _replace_editable_text(page, element, value)
        else:
            await _replace_field_text(page, element, value, settings.focus_timeout_ms)

    await run_interaction(session, "type", attempt)
    return await finish_action(session)
