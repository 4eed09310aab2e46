"""Explicit waits on a selector state or on network idle."""

from __future__ import annotations

from typing import Any, Optional

from ..common import _normalize_timeout
from ..errors import ValidationError
from ..models import ActionResult
from ..sanitize import sanitize_selector
from .base import finish_action, run_interaction

WAIT_STATES = ("visible", "hidden", "attached", "detached")


def _normalize_state(state: Optional[str]) -> str:
    clean = (state or "visible").strip().lower()
    if clean not in WAIT_STATES:
        allowed = ", ".join(WAIT_STATES)
        raise ValidationError(f"Invalid wait state {state!r}; expected one of: {allowed}")
    return clean


def effective_wait_timeout(timeout_ms: Optional[int], settings: Any) -> int:
    requested = _normalize_timeout(timeout_ms, settings.wait_timeout_ms)
    return min(requested, settings.max_wait_timeout_ms)


async def execute_wait(
    session: Any,
    selector: Optional[str] = None,
    state: Optional[str] = None,
    timeout_ms: Optional[int] = None,
) -> ActionResult:
    page = session.page
    timeout = effective_wait_timeout(timeout_ms, session.settings)

    if selector and selector.strip():
        safe = sanitize_selector(selector)
        wait_state = _normalize_state(state)

        async def attempt() -> None:
            await page.wait_for_selector(safe, state=wait_state, timeout=timeout)

    else:

        async def attempt() -> None:
            await page.wait_for_load_state("networkidle", timeout=timeout)

    # Explicit waits are never retried.
    await run_interaction(session, "wait", attempt, retries=0)
    return await finish_action(session)
