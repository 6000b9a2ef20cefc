"""PageDriver backed by a live Playwright page (Chromium, via CDP)."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable
from urllib.parse import urldefrag

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Frame, Locator, Page

from reflens.core.errors import DriverUnavailable
from reflens.core.types import AXNode
from reflens.driver._cdp import fetch_ax_tree
from reflens.driver.base import PageDriver

logger = logging.getLogger(__name__)


class PlaywrightDriver(PageDriver):
    """
    Wraps a Playwright ``Page``.

    Accessibility trees are read over a short-lived CDP session per query, so
    only Chromium pages can be snapshotted. Handles returned by the resolve
    methods are Playwright ``Locator`` objects.
    """

    def __init__(
        self,
        page: Page | None,
        *,
        timeout: float = 10.0,
        max_cursor_elements: int = 200,
    ) -> None:
        self._page = page
        self.timeout = timeout
        self.max_cursor_elements = max_cursor_elements

    @property
    def page(self) -> Page:
        if self._page is None or self._page.is_closed():
            raise DriverUnavailable("no page is loaded")
        return self._page

    @property
    def url(self) -> str:
        return self._page.url if self._page is not None else ""

    async def title(self) -> str:
        try:
            return await self.page.title()
        except (PlaywrightError, DriverUnavailable) as exc:
            logger.debug("could not read page title: %s", exc)
            return ""

    async def query_tree(self, scope: str | None = None, *, cursor: bool = False) -> AXNode:
        page = self.page
        try:
            return await asyncio.wait_for(self._query(page, scope, cursor), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise DriverUnavailable(f"accessibility query timed out after {self.timeout}s") from exc
        except PlaywrightError as exc:
            raise DriverUnavailable(exc.message) from exc

    async def _query(self, page: Page, scope: str | None, cursor: bool) -> AXNode:
        cdp = await page.context.new_cdp_session(page)
        try:
            return await fetch_ax_tree(
                cdp,
                scope,
                cursor=cursor,
                max_cursor_elements=self.max_cursor_elements,
            )
        finally:
            await cdp.detach()

    async def resolve_by_role(
        self,
        role: str,
        name: str | None = None,
        *,
        exact: bool = True,
        scope: str | None = None,
    ) -> list[Locator]:
        root = self.page.locator(scope).first if scope else self.page
        if name:
            locator = root.get_by_role(role, name=name, exact=exact)
        else:
            locator = root.get_by_role(role)
        try:
            return await locator.all()
        except PlaywrightError as exc:
            raise DriverUnavailable(exc.message) from exc

    async def resolve_by_selector(self, selector: str) -> Locator | None:
        locator = self.page.locator(selector)
        try:
            if await locator.count() == 0:
                return None
        except PlaywrightError as exc:
            raise DriverUnavailable(exc.message) from exc
        return locator.first

    def on_navigation(self, callback: Callable[[], None]) -> None:
        """
        Call ``callback`` whenever the main frame gets a new document.

        Fragment-only URL changes keep the document and are ignored; a reload
        of the same URL is caught through ``domcontentloaded``. Without a page
        there is nothing to watch and the hook is not registered.
        """
        if self._page is None:
            logger.debug("no page loaded; navigation hook not registered")
            return
        page = self._page
        document_url = urldefrag(page.url).url

        def _on_frame_navigated(frame: Frame) -> None:
            nonlocal document_url
            if frame.parent_frame is not None:
                return
            url = urldefrag(frame.url).url
            if url == document_url:
                return
            document_url = url
            logger.debug("main frame navigated to %s", frame.url)
            callback()

        def _on_dom_content_loaded(loaded: Page) -> None:
            nonlocal document_url
            document_url = urldefrag(loaded.url).url
            logger.debug("document loaded at %s", loaded.url)
            callback()

        page.on("framenavigated", _on_frame_navigated)
        page.on("domcontentloaded", _on_dom_content_loaded)
