"""Ref/selector resolution and the bounded retry wrapper for interactions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .common import DEFAULT_RETRY_BACKOFF_MS
from .errors import AxsnapError, StaleRefError, TargetNotFoundError
from .logging_utils import _log_event
from .models import ActionTarget
from .sanitize import sanitize_selector

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_LISTED_REFS = 10

# Message markers used only when the driver gives no structured signal.
_TRANSIENT_MARKERS = (
    "Timeout",
    "detached",
    "Target closed",
    "has been closed",
    "Execution context was destroyed",
)


def _available_refs_hint(refs: Any) -> str:
    available = list(refs.keys())
    if not available:
        return " No refs available. Call observe first."
    listed = ", ".join(available[:MAX_LISTED_REFS])
    if len(available) > MAX_LISTED_REFS:
        listed += f" ... ({len(available)} total)"
    return f" Available refs: {listed}"


async def _is_attached(handle: Any) -> bool:
    try:
        return bool(await handle.evaluate("(el) => el.isConnected"))
    except Exception:
        return False


def _coerce_target(target: Union[ActionTarget, dict, None]) -> ActionTarget:
    if target is None:
        return ActionTarget()
    if isinstance(target, ActionTarget):
        return target
    return ActionTarget.model_validate(target)


async def resolve_element(
    session: Any,
    target: Union[ActionTarget, dict, None],
    action_name: str,
) -> Any:
    """
    Bind an action target to a live element handle.

    A ``ref`` is looked up in the session's current ref table and checked for
    attachment; a ``selector`` is sanitised and queried directly. Raises
    :class:`TargetNotFoundError` or :class:`StaleRefError`, never a bare driver error.
    """
    clean = _coerce_target(target)

    if clean.ref:
        ref = clean.ref.strip()
        handle = session.get_element_by_ref(ref)
        if handle is None:
            raise TargetNotFoundError(
                action_name,
                f'Element ref "{ref}" not found in current snapshot.'
                + _available_refs_hint(session.refs),
            )
        if not await _is_attached(handle):
            raise StaleRefError(
                action_name,
                f'Element ref "{ref}" is stale (detached from DOM). '
                "Call observe to get fresh refs.",
            )
        return handle

    if clean.selector:
        safe = sanitize_selector(clean.selector)
        try:
            handle = await session.page.query_selector(safe)
        except Exception as exc:
            raise TargetNotFoundError(
                action_name, f'Selector "{safe}" could not be queried: {exc}'
            ) from exc
        if handle is None:
            raise TargetNotFoundError(action_name, f'No element matches selector "{safe}"')
        return handle

    raise TargetNotFoundError(action_name, "Either ref or selector must be provided")


def is_transient_error(exc: BaseException) -> bool:
    if isinstance(exc, AxsnapError):
        return False
    if isinstance(exc, (PlaywrightTimeoutError, asyncio.TimeoutError)):
        return True
    message = str(exc or "")
    return any(marker in message for marker in _TRANSIENT_MARKERS)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    retries: int = 1,
    action_name: str = "action",
    backoff_ms: int = DEFAULT_RETRY_BACKOFF_MS,
    classify: Optional[Callable[[BaseException], bool]] = None,
) -> T:
    """
    Run ``fn`` with a bounded retry budget.

    attempt(n) --success--> done
    attempt(n) --transient, n < retries--> wait backoff * (n + 1) --> attempt(n + 1)
    attempt(n) --non-transient or n == retries--> re-raise the original error
    """
    max_retries = max(0, int(retries))
    is_transient = classify or is_transient_error
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:
            if not is_transient(exc) or attempt >= max_retries:
                raise
            attempt += 1
            _log_event(
                logger,
                level=logging.DEBUG,
                event="action_retry",
                action=action_name,
                attempt=attempt,
                error=exc,
            )
            delay_ms = max(0, int(backoff_ms)) * attempt
            await asyncio.sleep(delay_ms / 1000.0)
