"""Configure how JavaScript alert/confirm/prompt dialogs are answered."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..errors import ValidationError
from ..logging_utils import _log_event
from ..models import ActionResult
from ..session import DialogConfig
from .base import finish_action

logger = logging.getLogger(__name__)

DIALOG_ACTIONS = ("accept", "dismiss")


def install_dialog_handler(session: Any, config: DialogConfig) -> None:
    """Install a page ``dialog`` listener for ``config``, replacing any earlier one."""
    page = session.page
    previous = session._dialog_handler
    if previous is not None:
        try:
            page.remove_listener("dialog", previous)
        except Exception as exc:
            _log_event(logger, level=logging.DEBUG, event="dialog_handler_remove_failed", error=exc)

    async def handle(dialog: Any) -> None:
        try:
            if config.action == "accept":
                if config.prompt_text is not None:
                    await dialog.accept(config.prompt_text)
                else:
                    await dialog.accept()
            else:
                await dialog.dismiss()
        except Exception as exc:
            _log_event(logger, level=logging.WARNING, event="dialog_answer_failed", error=exc)
            return
        _log_event(
            logger,
            level=logging.INFO,
            event="dialog_answered",
            session_id=session.id,
            dialog_type=getattr(dialog, "type", ""),
            action=config.action,
        )

    page.on("dialog", handle)
    session._dialog_handler = handle
    session.dialog_config = config


async def execute_dialog(
    session: Any,
    action: Optional[str] = None,
    prompt_text: Optional[str] = None,
) -> ActionResult:
    clean = (action or "accept").strip().lower()
    if clean not in DIALOG_ACTIONS:
        raise ValidationError(f"Invalid dialog action {action!r}; expected accept or dismiss")
    install_dialog_handler(session, DialogConfig(action=clean, prompt_text=prompt_text))
    return await finish_action(session)
