"""Pick an option from a native <select> or a scripted dropdown."""

from __future__ import annotations

import json
import logging
from typing import Any, List

from ..errors import ActionError
from ..logging_utils import _log_event
from ..models import ActionResult, ActionTarget
from ..resolve import resolve_element
from .base import finish_action, pause, run_interaction, scroll_into_view

logger = logging.getLogger(__name__)

DROPDOWN_OPEN_SETTLE_MS = 300

_TAG_NAME_JS = "(el) => el.tagName.toLowerCase()"


def _option_selectors(value: str) -> List[str]:
    quoted = json.dumps(value)
    return [
        f"[role=option]:has-text({quoted})",
        f"[role=listbox] >> text={quoted}",
        f"li:has-text({quoted})",
        f"[data-value={quoted}]",
        f".option:has-text({quoted})",
    ]


async def _click_dropdown_option(page: Any, value: str, timeout_ms: int) -> None:
    for candidate in _option_selectors(value):
        try:
            option = page.locator(candidate).first
            if await option.count() > 0:
                await option.click(timeout=timeout_ms)
                return
        except Exception as exc:
            _log_event(
                logger,
                level=logging.DEBUG,
                event="dropdown_option_probe_failed",
                selector=candidate,
                error=exc,
            )
    raise ActionError("select", f'Could not find option "{value}" in dropdown')


async def execute_select(session: Any, target: ActionTarget, value: str) -> ActionResult:
    element = await resolve_element(session, target, "select")
    settings = session.settings
    page = session.page

    async def attempt() -> None:
        await scroll_into_view(element, settings.scroll_into_view_timeout_ms)
        tag = await element.evaluate(_TAG_NAME_JS)
        if tag == "select":
            # Matches by value or by label.
            await element.select_option(value, timeout=settings.click_timeout_ms)
            return
        await element.click(timeout=settings.click_timeout_ms)
        await pause(page, DROPDOWN_OPEN_SETTLE_MS)
        await _click_dropdown_option(page, value, settings.click_timeout_ms)

    await run_interaction(session, "select", attempt)
    return await finish_action(session)
