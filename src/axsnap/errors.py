"""Typed errors raised by the snapshot, resolution and action layers."""

from __future__ import annotations

from typing import Optional


class AxsnapError(Exception):
    """Base class for recoverable errors surfaced to callers."""

    code = "AXSNAP_ERROR"


class ActionError(AxsnapError):
    """An action could not be carried out."""

    code = "ACTION_FAILED"

    def __init__(self, action: str, reason: Optional[str] = None) -> None:
        self.action = action
        self.reason = reason or ""
        detail = f": {reason}" if reason else ""
        super().__init__(f"Action failed: {action}{detail}")


class TargetNotFoundError(ActionError):
    """The ref or selector did not resolve to any element."""

    code = "TARGET_NOT_FOUND"


class StaleRefError(ActionError):
    """The ref resolved to a handle that is no longer attached to the document."""

    code = "STALE_REF"


class NavigationError(ActionError):
    code = "NAVIGATION_FAILED"

    def __init__(self, url: str, reason: Optional[str] = None) -> None:
        self.url = url
        detail = f"Navigation to {url} failed"
        if reason:
            detail += f": {reason}"
        super().__init__("navigate", detail)


class ValidationError(AxsnapError, ValueError):
    code = "VALIDATION_ERROR"


class DomainNotAllowedError(AxsnapError):
    code = "DOMAIN_NOT_ALLOWED"

    def __init__(self, domain: str) -> None:
        self.domain = domain
        super().__init__(f"Domain not allowed: {domain}")
