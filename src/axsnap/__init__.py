"""
axsnap: accessibility snapshots with stable element refs for browser agents.

``observe`` returns a compact list of interactive and meaningful elements, each
tagged with a short ref (``r1``, ``r2``, ...). Actions accept those refs, act on
the live element, and return a fresh snapshot so the caller never holds refs
from an older view of the page.
"""

from typing import Optional

from .actions import ActionParams, SUPPORTED_ACTIONS, execute_action
from .errors import (
    ActionError,
    AxsnapError,
    DomainNotAllowedError,
    NavigationError,
    StaleRefError,
    TargetNotFoundError,
    ValidationError,
)
from .models import ActionResult, ActionTarget, PageSnapshot, RefElement, Verbosity
from .resolve import is_transient_error, resolve_element, with_retry
from .runtime import BrowserRuntime
from .session import DialogConfig, Session
from .settings import AxsnapSettings, get_settings, load_settings, set_settings
from .snapshot import SnapshotCapture, format_snapshot, take_snapshot


async def observe(
    session: Session,
    *,
    scope: Optional[str] = None,
    verbosity: Optional[str] = None,
    max_refs: Optional[int] = None,
) -> PageSnapshot:
    """Snapshot ``session``'s page under its lock and install the new ref table."""
    return await session.run(
        lambda: session.observe(scope=scope, verbosity=verbosity, max_refs=max_refs)
    )


__all__ = [
    "ActionError",
    "ActionParams",
    "ActionResult",
    "ActionTarget",
    "AxsnapError",
    "AxsnapSettings",
    "BrowserRuntime",
    "DialogConfig",
    "DomainNotAllowedError",
    "NavigationError",
    "PageSnapshot",
    "RefElement",
    "SUPPORTED_ACTIONS",
    "Session",
    "SnapshotCapture",
    "StaleRefError",
    "TargetNotFoundError",
    "ValidationError",
    "Verbosity",
    "execute_action",
    "format_snapshot",
    "get_settings",
    "is_transient_error",
    "load_settings",
    "observe",
    "resolve_element",
    "set_settings",
    "take_snapshot",
    "with_retry",
]
