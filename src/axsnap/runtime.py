"""Chromium lifecycle for sessions driven outside a host application."""

from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.async_api import async_playwright

from .settings import AxsnapSettings, get_settings
from .session import Session

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = [
    "--disable-dev-shm-usage",
    "--no-first-run",
    "--no-default-browser-check",
]


class BrowserRuntime:
    """Owns one Playwright driver, one Chromium instance and one context."""

    def __init__(self, settings: Optional[AxsnapSettings] = None) -> None:
        self.settings = settings or get_settings()
        self._started = False
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None

    async def start(self) -> None:
        if self._started:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.settings.headless,
                args=list(_LAUNCH_ARGS),
            )
            self._context = await self._browser.new_context()
        except Exception:
            await self._cleanup_partial_start()
            raise
        self._started = True
        logger.info("Browser runtime started headless=%s", self.settings.headless)

    async def _cleanup_partial_start(self) -> None:
        context, browser, playwright = self._context, self._browser, self._playwright
        self._context = self._browser = self._playwright = None
        for closer in (
            getattr(context, "close", None),
            getattr(browser, "close", None),
            getattr(playwright, "stop", None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as exc:
                logger.debug("Ignoring cleanup failure after aborted start: %s", exc)

    async def new_session(self, *, session_id: Optional[str] = None) -> Session:
        await self.start()
        page = await self._context.new_page()
        return Session(page, session_id=session_id, settings=self.settings)

    async def stop(self) -> None:
        if not self._started:
            return

        context, browser, playwright = self._context, self._browser, self._playwright
        self._started = False
        self._context = self._browser = self._playwright = None

        try:
            if context is not None:
                await context.close()
        finally:
            try:
                if browser is not None:
                    await browser.close()
            finally:
                if playwright is not None:
                    await playwright.stop()
        logger.info("Browser runtime stopped")

    async def __aenter__(self) -> "BrowserRuntime":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()
