"""Navigate the session page to a sanitised, allow-listed URL."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional
from urllib.parse import urlsplit

from ..errors import DomainNotAllowedError, NavigationError, ValidationError
from ..logging_utils import _log_event
from ..models import ActionResult
from ..resolve import with_retry
from ..sanitize import sanitize_url
from .base import finish_action

logger = logging.getLogger(__name__)

WAIT_UNTIL_STATES = ("load", "domcontentloaded", "networkidle", "commit")


def is_domain_allowed(host: str, allowed_domains: Iterable[str]) -> bool:
    allowed = [domain.strip().lower() for domain in allowed_domains if domain and domain.strip()]
    if not allowed:
        return True
    clean = (host or "").strip().lower()
    return any(clean == domain or clean.endswith("." + domain) for domain in allowed)


async def execute_navigate(
    session: Any,
    url: str,
    wait_until: Optional[str] = None,
) -> ActionResult:
    safe_url = sanitize_url(url)
    host = urlsplit(safe_url).hostname or ""
    if not is_domain_allowed(host, session.settings.allowed_domains):
        raise DomainNotAllowedError(host)

    state = (wait_until or "domcontentloaded").strip().lower()
    if state not in WAIT_UNTIL_STATES:
        allowed = ", ".join(WAIT_UNTIL_STATES)
        raise ValidationError(f"Invalid wait_until {wait_until!r}; expected one of: {allowed}")

    settings = session.settings
    page = session.page
    try:
        await with_retry(
            lambda: page.goto(safe_url, wait_until=state, timeout=settings.navigation_timeout_ms),
            retries=settings.action_retries,
            action_name="navigate",
            backoff_ms=settings.retry_backoff_ms,
        )
    except Exception as exc:
        raise NavigationError(safe_url, str(exc)) from exc

    _log_event(logger, level=logging.INFO, event="navigated", session_id=session.id, url=safe_url)
    return await finish_action(session)
