"""Attach local files to a file input."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Iterable, List, Sequence

from ..errors import ActionError
from ..logging_utils import _log_event
from ..models import ActionResult, ActionTarget
from ..resolve import resolve_element
from .base import finish_action, run_interaction

logger = logging.getLogger(__name__)


def _is_under(path: str, prefix: str) -> bool:
    clean = prefix.rstrip("/") or "/"
    return path == clean or path.startswith(clean + "/")


def validate_upload_paths(paths: Sequence[str], blocked_prefixes: Iterable[str]) -> List[str]:
    """Reject traversal and system locations before anything reaches the browser."""
    if not paths:
        raise ActionError("upload", "At least one file path is required")
    prefixes = tuple(blocked_prefixes)
    resolved: List[str] = []
    for raw in paths:
        text = str(raw or "").strip()
        if not text:
            raise ActionError("upload", "File paths must not be empty")
        if ".." in Path(text).parts:
            raise ActionError("upload", f"Path traversal not allowed: {text}")
        # Check both the literal location and its symlink target.
        literal = os.path.normpath(os.path.abspath(os.path.expanduser(text)))
        absolute = str(Path(literal).resolve())
        for prefix in prefixes:
            if _is_under(literal, prefix) or _is_under(absolute, prefix):
                raise ActionError("upload", f"Access to system path not allowed: {literal}")
        resolved.append(absolute)
    return resolved


async def execute_upload(session: Any, target: ActionTarget, paths: Sequence[str]) -> ActionResult:
    files = validate_upload_paths(paths, session.settings.upload_blocked_prefixes)
    element = await resolve_element(session, target, "upload")

    async def attempt() -> None:
        await element.set_input_files(files)

    await run_interaction(session, "upload", attempt)
    _log_event(logger, level=logging.INFO, event="files_uploaded", session_id=session.id, count=len(files))
    return await finish_action(session)
