"""Scoped Playwright browser sessions.

Every scrape owns exactly one browser process from launch to close. The
session is an async context manager so the browser is released on every
exit path, including errors raised while scraping.
"""

import random
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from grocerybag.logging_config import get_logger

logger = get_logger(__name__)

# User agents for rotation (realistic Chrome/Firefox on Windows/Mac)
# fmt: off
USER_AGENTS = [
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
    ),
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:122.0) Gecko/20100101 Firefox/122.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:122.0) Gecko/20100101 Firefox/122.0",
]
# fmt: on

VIEWPORT_SIZES = [
    {"width": 1920, "height": 1080},
    {"width": 1536, "height": 864},
    {"width": 1440, "height": 900},
    {"width": 1366, "height": 768},
]

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-blink-features=AutomationControlled",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]

EXTRA_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
}


class BrowserSession:
    """One headless Chromium browser, context and page for a single scrape.

    Usage:
        async with BrowserSession() as page:
            await page.goto(url)
    """

    def __init__(
        self,
        headless: bool = True,
        rng: random.Random | None = None,
        timeout: float = 15.0,
    ):
        chooser = rng or random
        self.headless = headless
        self.timeout = timeout
        self.user_agent = chooser.choice(USER_AGENTS)
        self.viewport = chooser.choice(VIEWPORT_SIZES)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self.page: Page | None = None

    async def open(self) -> Page:
        """Launch the browser and open a page."""
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=LAUNCH_ARGS,
        )
        self._context = await self._browser.new_context(
            locale="en-US",
            user_agent=self.user_agent,
            viewport=self.viewport,
            ignore_https_errors=True,
        )
        await self._context.set_extra_http_headers(EXTRA_HEADERS)
        self.page = await self._context.new_page()
        self.page.set_default_timeout(self.timeout * 1000)
        vp = self.viewport
        logger.debug(f"Browser session opened: viewport={vp['width']}x{vp['height']}")
        return self.page

    async def close(self) -> None:
        """Close context, browser and Playwright; every step is attempted."""
        if self._context:
            try:
                await self._context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")
            self._context = None
            self.page = None
        if self._browser:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None
        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self._playwright = None

    @property
    def is_open(self) -> bool:
        """Whether any browser resource is still held."""
        return any((self._playwright, self._browser, self._context))

    async def __aenter__(self) -> Page:
        try:
            return await self.open()
        except BaseException:
            await self.close()
            raise

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
