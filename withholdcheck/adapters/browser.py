"""Scoped browser resource shared by the adapters of one attempt.

Opening launches Chromium (or connects to a remote one over CDP); closing
releases every page, the browser and the Playwright driver, whether the
attempt succeeded or raised.
"""

import logging
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .base import AcquisitionError

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/112.0.0.0 Safari/537.36"
)


class BrowserSession:
    """Context manager around one Playwright browser.

    Usage:
        with BrowserSession(headless=True) as session:
            page = session.new_page()
    """

    def __init__(
        self,
        headless: bool = True,
        ws_endpoint: Optional[str] = None,
        timeout_ms: int = 30000,
    ):
        self.headless = headless
        self.ws_endpoint = ws_endpoint
        self.timeout_ms = timeout_ms
        self._playwright = None
        self._browser = None
        self._context = None
        self._pages: List = []

    def __enter__(self) -> "BrowserSession":
        try:
            self._playwright = sync_playwright().start()
            chromium = self._playwright.chromium
            if self.ws_endpoint:
                self._browser = chromium.connect_over_cdp(self.ws_endpoint)
                logger.info("Connected to remote browser")
            else:
                self._browser = chromium.launch(headless=self.headless)
                logger.info(f"Launched local browser (headless={self.headless})")
            self._context = self._browser.new_context(user_agent=USER_AGENT)
            self._context.set_default_timeout(self.timeout_ms)
        except PlaywrightError as e:
            self.close()
            raise AcquisitionError("browser", f"could not start browser: {e}")
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def new_page(self):
        """Open a fresh page in this session's browser context."""
        if self._context is None:
            raise RuntimeError("BrowserSession is not open")
        try:
            page = self._context.new_page()
        except PlaywrightError as e:
            raise AcquisitionError("browser", f"could not open page: {e}")
        self._pages.append(page)
        return page

    def close(self) -> None:
        """Release pages, browser and driver. Safe to call more than once."""
        for page in self._pages:
            try:
                page.close()
            except PlaywrightError as e:
                logger.debug(f"Page close failed: {e}")
        self._pages = []

        for resource in (self._context, self._browser):
            if resource is None:
                continue
            try:
                resource.close()
            except PlaywrightError as e:
                logger.debug(f"Browser close failed: {e}")
        self._context = None

        if self._browser is not None:
            logger.info("Browser closed")
            self._browser = None

        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
