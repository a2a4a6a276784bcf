# src/scrapers/browser_scraper.py

"""Headless Chromium page acquisition via Playwright."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from playwright.async_api import (
    Browser,
    BrowserContext,
    Playwright,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError

from src.config.settings import Settings
from src.extractors.metadata_extractor import MetadataExtractor
from src.extractors.price_extractor import PriceExtractor
from src.scrapers.base_scraper import BaseScraper
from src.scrapers.errors import PageAcquisitionError
from src.scrapers.playwright_document import PlaywrightDocument


class BrowserScraper(BaseScraper):
    """One Chromium process per run, one fresh context per product.

    Use as an async context manager::

        async with BrowserScraper() as scraper:
            result = await scraper.scrape(product)
    """

    def __init__(
        self,
        headless: bool = Settings.HEADLESS,
        navigation_timeout: float = Settings.NAVIGATION_TIMEOUT,
        settle_delay: float = Settings.SETTLE_DELAY,
        user_agent: str = Settings.USER_AGENT,
        price_extractor: PriceExtractor | None = None,
        metadata_extractor: MetadataExtractor | None = None,
    ) -> None:
        super().__init__("browser", price_extractor, metadata_extractor)
        self.headless = headless
        self.navigation_timeout = navigation_timeout
        self.settle_delay = settle_delay
        self.user_agent = user_agent
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> "BrowserScraper":
        await self.start()
        return self

    async def start(self) -> None:
        if self._browser is not None:
            return
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=Settings.BROWSER_ARGS,
            )
        except PlaywrightError as exc:
            await self._playwright.stop()
            self._playwright = None
            raise PageAcquisitionError(
                "", f"Could not launch Chromium: {exc}",
            ) from exc
        self.logger.info(
            "[%s] Chromium launched (headless=%s)",
            self.source_name, self.headless,
        )

    async def close(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as exc:
                self.logger.warning(
                    "[%s] Browser close failed: %s", self.source_name, exc,
                )
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    @asynccontextmanager
    async def _open_document(self, url: str) -> AsyncIterator[PlaywrightDocument]:
        if self._browser is None:
            raise RuntimeError("BrowserScraper used outside 'async with'")
        context: BrowserContext | None = None
        try:
            try:
                context = await self._browser.new_context(
                    user_agent=self.user_agent,
                    viewport=Settings.VIEWPORT,  # type: ignore[arg-type]
                )
                page = await context.new_page()
                response = await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self.navigation_timeout * 1000,
                )
            except PlaywrightError as exc:
                raise PageAcquisitionError(
                    url, f"Navigation failed: {exc}",
                ) from exc
            if response is not None:
                self.logger.debug(
                    "[%s] HTTP %d for %s",
                    self.source_name, response.status, url,
                )
            await asyncio.sleep(self.settle_delay)
            yield PlaywrightDocument(page)
        finally:
            if context is not None:
                try:
                    await context.close()
                except Exception as exc:
                    self.logger.warning(
                        "[%s] Context close failed for %s: %s",
                        self.source_name, url, exc,
                    )
