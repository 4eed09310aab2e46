"""Press a single key or modifier chord on the focused element."""

from __future__ import annotations

import re
from typing import Any

from ..errors import ActionError
from ..models import ActionResult
from .base import finish_action, run_interaction, settle

KEY_SETTLE_TIMEOUT_MS = 2000

ALLOWED_KEYS = frozenset(
    {
        "Enter",
        "Escape",
        "Tab",
        "Backspace",
        "Delete",
        "ArrowUp",
        "ArrowDown",
        "ArrowLeft",
        "ArrowRight",
        "Home",
        "End",
        "PageUp",
        "PageDown",
        "Space",
        *(f"F{index}" for index in range(1, 13)),
    }
)

MODIFIER_PATTERN = re.compile(r"^(Control|Alt|Shift|Meta)\+\w+$")


def validate_key(key: str) -> str:
    text = str(key or "")
    if text in ALLOWED_KEYS or MODIFIER_PATTERN.match(text):
        return text
    if len(text) == 1 and 32 <= ord(text) <= 126:
        return text
    raise ActionError("press", f"Key not allowed: {text!r}")


async def execute_press(session: Any, key: str) -> ActionResult:
    clean = validate_key(key)
    page = session.page

    async def attempt() -> None:
        await page.keyboard.press(clean)

    await run_interaction(session, "press", attempt)
    await settle(page, KEY_SETTLE_TIMEOUT_MS)
    return await finish_action(session)
