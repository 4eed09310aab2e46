"""Action pipeline: every action resolves, acts, settles and re-observes."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import ActionError, ValidationError
from ..logging_utils import _log_event
from ..models import ActionResult, ActionTarget
from .click import execute_click
from .dialog import execute_dialog, install_dialog_handler
from .hover import execute_hover
from .keyboard import execute_press, validate_key
from .navigate import execute_navigate, is_domain_allowed
from .scroll import execute_scroll
from .select import execute_select
from .type_text import execute_type
from .upload import execute_upload, validate_upload_paths
from .wait import execute_wait

logger = logging.getLogger(__name__)


class ActionParams(BaseModel):
    ref: Optional[str] = None
    selector: Optional[str] = None
    value: Optional[str] = None
    paths: List[str] = Field(default_factory=list)
    direction: Optional[str] = None
    state: Optional[str] = None
    timeout_ms: Optional[int] = None
    key: Optional[str] = None
    url: Optional[str] = None
    wait_until: Optional[str] = None
    dialog_action: Optional[str] = None
    prompt_text: Optional[str] = None

    @property
    def target(self) -> ActionTarget:
        return ActionTarget(ref=self.ref, selector=self.selector)


def _require_target(action: str, params: ActionParams) -> ActionTarget:
    target = params.target
    if target.is_empty:
        raise ValidationError(f"{action} requires ref or selector")
    return target


def _require(action: str, name: str, value: Any) -> Any:
    if value is None or (isinstance(value, str) and value == ""):
        raise ValidationError(f"{action} requires {name}")
    return value


async def _click(session: Any, params: ActionParams) -> ActionResult:
    return await execute_click(session, _require_target("click", params))


async def _type(session: Any, params: ActionParams) -> ActionResult:
    target = _require_target("type", params)
    if params.value is None:
        raise ValidationError("type requires value")
    return await execute_type(session, target, params.value)


async def _select(session: Any, params: ActionParams) -> ActionResult:
    target = _require_target("select", params)
    return await execute_select(session, target, _require("select", "value", params.value))


async def _hover(session: Any, params: ActionParams) -> ActionResult:
    return await execute_hover(session, _require_target("hover", params))


async def _scroll(session: Any, params: ActionParams) -> ActionResult:
    return await execute_scroll(session, params.target, params.direction)


async def _upload(session: Any, params: ActionParams) -> ActionResult:
    target = _require_target("upload", params)
    paths = list(params.paths)
    if not paths and params.value:
        paths = [params.value]
    return await execute_upload(session, target, paths)


async def _wait(session: Any, params: ActionParams) -> ActionResult:
    return await execute_wait(session, params.selector, params.state, params.timeout_ms)


async def _press(session: Any, params: ActionParams) -> ActionResult:
    key = params.key if params.key is not None else params.value
    return await execute_press(session, _require("press", "key", key))


async def _dialog(session: Any, params: ActionParams) -> ActionResult:
    return await execute_dialog(session, params.dialog_action or params.value, params.prompt_text)


async def _navigate(session: Any, params: ActionParams) -> ActionResult:
    url = params.url if params.url is not None else params.value
    return await execute_navigate(session, _require("navigate", "url", url), params.wait_until)


_HANDLERS: Dict[str, Callable[[Any, ActionParams], Awaitable[ActionResult]]] = {
    "click": _click,
    "type": _type,
    "select": _select,
    "hover": _hover,
    "scroll": _scroll,
    "upload": _upload,
    "wait": _wait,
    "press": _press,
    "dialog": _dialog,
    "navigate": _navigate,
}

SUPPORTED_ACTIONS = tuple(_HANDLERS)


def _coerce_params(params: Union[ActionParams, Mapping[str, Any], None]) -> ActionParams:
    if params is None:
        return ActionParams()
    if isinstance(params, ActionParams):
        return params
    try:
        return ActionParams.model_validate(dict(params))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid action parameters: {exc}") from exc


async def execute_action(
    session: Any,
    action: str,
    params: Union[ActionParams, Mapping[str, Any], None] = None,
) -> ActionResult:
    """Validate and run one action under the session lock."""
    name = (action or "").strip().lower()
    handler = _HANDLERS.get(name)
    if handler is None:
        raise ActionError(name or "unknown", f"Unknown action. Supported: {', '.join(SUPPORTED_ACTIONS)}")
    clean = _coerce_params(params)
    _log_event(logger, level=logging.DEBUG, event="action_start", session_id=session.id, action=name)
    return await session.run(lambda: handler(session, clean))


__all__ = [
    "ActionParams",
    "SUPPORTED_ACTIONS",
    "execute_action",
    "execute_click",
    "execute_dialog",
    "execute_hover",
    "execute_navigate",
    "execute_press",
    "execute_scroll",
    "execute_select",
    "execute_type",
    "execute_upload",
    "execute_wait",
    "install_dialog_handler",
    "is_domain_allowed",
    "validate_key",
    "validate_upload_paths",
]
