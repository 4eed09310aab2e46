"""Shared plumbing for actions: retries, best-effort steps and the trailing snapshot."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from ..common import _safe_text
from ..errors import ActionError, AxsnapError
from ..logging_utils import _log_event
from ..models import ActionResult
from ..resolve import with_retry

logger = logging.getLogger(__name__)


async def run_interaction(
    session: Any,
    action_name: str,
    fn: Callable[[], Awaitable[Any]],
    *,
    retries: Optional[int] = None,
) -> Any:
    """Run ``fn`` through the retry wrapper and type whatever finally escapes."""
    settings = session.settings
    budget = settings.action_retries if retries is None else retries
    try:
        return await with_retry(
            fn,
            retries=budget,
            action_name=action_name,
            backoff_ms=settings.retry_backoff_ms,
        )
    except AxsnapError:
        raise
    except Exception as exc:
        raise ActionError(action_name, str(exc)) from exc


async def best_effort(event: str, fn: Callable[[], Awaitable[Any]], **fields: Any) -> None:
    try:
        await fn()
    except Exception as exc:
        _log_event(logger, level=logging.DEBUG, event=event, error=exc, **fields)


async def scroll_into_view(element: Any, timeout_ms: int) -> None:
    await best_effort(
        "scroll_into_view_skipped",
        lambda: element.scroll_into_view_if_needed(timeout=timeout_ms),
    )


async def settle(page: Any, timeout_ms: int, state: str = "domcontentloaded") -> None:
    await best_effort(
        "settle_skipped",
        lambda: page.wait_for_load_state(state, timeout=timeout_ms),
        state=state,
    )


async def pause(page: Any, ms: int) -> None:
    await best_effort("pause_skipped", lambda: page.wait_for_timeout(ms))


async def finish_action(session: Any) -> ActionResult:
    snapshot = await session.observe()
    return ActionResult(
        success=True,
        snapshot=snapshot,
        url=_safe_text(getattr(session.page, "url", "")),
    )
