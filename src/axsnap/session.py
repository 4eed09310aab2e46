"""Per-page session state: the ref table and the action pipeline lock."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from .logging_utils import _log_event
from .models import PageSnapshot
from .settings import AxsnapSettings, get_settings
from .snapshot import take_snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DialogConfig:
    action: str = "accept"
    prompt_text: Optional[str] = None


class Session:
    """
    One browser page driven on behalf of one caller.

    The session exclusively owns its ref table. Every snapshot replaces the
    table wholesale, so a ref from an older snapshot can never silently point
    at a different element. All work on the page runs under ``lock``.
    """

    def __init__(
        self,
        page: Any,
        *,
        session_id: Optional[str] = None,
        settings: Optional[AxsnapSettings] = None,
    ) -> None:
        self.id = session_id or uuid.uuid4().hex[:12]
        self.page = page
        self.settings = settings or get_settings()
        self.refs: Dict[str, Any] = {}
        self.lock = asyncio.Lock()
        self.created_at = time.time()
        self.last_used_at = self.created_at
        self.dialog_config: Optional[DialogConfig] = None
        self._dialog_handler: Optional[Callable[[Any], Any]] = None

    def touch(self) -> None:
        self.last_used_at = time.time()

    def get_element_by_ref(self, ref: str) -> Optional[Any]:
        return self.refs.get(ref)

    def replace_refs(self, ref_map: Dict[str, Any]) -> None:
        self.refs.clear()
        for ref, handle in ref_map.items():
            self.refs[ref] = handle

    async def observe(
        self,
        *,
        scope: Optional[str] = None,
        verbosity: Optional[str] = None,
        max_refs: Optional[int] = None,
    ) -> PageSnapshot:
        """Snapshot the page and install the fresh ref table. Caller holds ``lock``."""
        capture = await take_snapshot(
            self.page,
            scope=scope,
            verbosity=verbosity,
            max_refs=max_refs,
            settings=self.settings,
        )
        self.replace_refs(capture.ref_map)
        self.touch()
        _log_event(
            logger,
            level=logging.DEBUG,
            event="refs_replaced",
            session_id=self.id,
            ref_count=len(self.refs),
        )
        return capture.snapshot

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T:
        async with self.lock:
            self.touch()
            return await fn()
