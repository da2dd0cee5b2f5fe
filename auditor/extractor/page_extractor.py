"""
Headless-browser page extractor
"""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from auditor.cancellation import CancellationToken
from auditor.config import ExtractorConfig
from auditor.exceptions import NavigationError, RenderError
from auditor.extractor.dom_script import CORE_WEB_VITALS_JS, EXTRACT_PAGE_DATA_JS
from auditor.extractor.models import CrawlSnapshot, ResourceStats, WebVitals
from auditor.extractor.page_parser import build_snapshot

logger = logging.getLogger(__name__)


class _ResourceCounter:
    """Network observer attached to one page before navigation"""

    def __init__(self):
        self.requests = 0
        self.responses = 0
        self.failures = 0
        self.total_bytes = 0

    def on_request(self, request) -> None:
        self.requests += 1

    def on_response(self, response) -> None:
        self.responses += 1
        length = response.headers.get("content-length")
        if length and length.isdigit():
            self.total_bytes += int(length)

    def on_request_failed(self, request) -> None:
        self.failures += 1

    def attach(self, page: Page) -> None:
        page.on("request", self.on_request)
        page.on("response", self.on_response)
        page.on("requestfailed", self.on_request_failed)

    def detach(self, page: Page) -> None:
        page.remove_listener("request", self.on_request)
        page.remove_listener("response", self.on_response)
        page.remove_listener("requestfailed", self.on_request_failed)

    def snapshot(self) -> ResourceStats:
        return ResourceStats(
            requests=self.requests,
            responses=self.responses,
            failures=self.failures,
            total_bytes=self.total_bytes,
        )


class PageExtractor:
    """
    Loads one URL per call in a fresh browser context and returns a CrawlSnapshot.

    The browser process is started lazily on the first extract() and stays up
    until close(); callers own that teardown.
    """

    def __init__(self, config: ExtractorConfig | None = None):
        self.config = config or ExtractorConfig()
        self._playwright = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    async def _ensure_browser(self, url: str) -> Browser:
        async with self._lock:
            if self._browser and self._browser.is_connected():
                return self._browser
            try:
                if not self._playwright:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.headless
                )
            except PlaywrightError as e:
                raise NavigationError(url, f"browser failed to start: {e}") from e
            logger.info("Browser launched")
            return self._browser

    async def _create_context(self, browser: Browser, overrides: dict) -> BrowserContext:
        ctx_kwargs: dict[str, Any] = {
            "user_agent": overrides.get("user_agent", self.config.user_agent),
            "viewport": {
                "width": overrides.get("viewport_width", self.config.viewport_width),
                "height": overrides.get("viewport_height", self.config.viewport_height),
            },
            "extra_http_headers": {
                "Accept-Language": overrides.get(
                    "accept_language", self.config.accept_language
                ),
            },
        }
        return await browser.new_context(**ctx_kwargs)

    async def extract(
        self,
        url: str,
        options: dict | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> CrawlSnapshot:
        """
        Navigate to url and extract page data.

        Args:
            url: Absolute http(s) URL
            options: Per-call overrides of the ExtractorConfig fields
            cancel_token: Checked between the navigation stages

        Raises:
            NavigationError: Browser start failure, DNS, timeout or non-2xx
            RenderError: The required selector never appeared
            JobCancelled: cancel_token was set between stages
        """
        options = options or {}
        timeout_ms = options.get("timeout_ms", self.config.timeout_ms)
        selector = options.get("wait_for_selector", self.config.wait_for_selector)
        settle_delay = options.get("settle_delay", self.config.settle_delay)
        collect_vitals = options.get("collect_web_vitals", self.config.collect_web_vitals)

        browser = await self._ensure_browser(url)
        context = await self._create_context(browser, options)
        page = None
        counter = _ResourceCounter()
        try:
            page = await context.new_page()
            counter.attach(page)

            logger.info(f"Loading {url}")
            started = time.monotonic()
            try:
                response = await page.goto(
                    url, wait_until="domcontentloaded", timeout=timeout_ms
                )
            except PlaywrightTimeoutError as e:
                raise NavigationError(url, f"navigation timed out after {timeout_ms}ms") from e
            except PlaywrightError as e:
                raise NavigationError(url, str(e).splitlines()[0]) from e

            if response is None:
                raise NavigationError(url, "no response received")
            if not response.ok:
                raise NavigationError(url, "HTTP error", status_code=response.status)

            try:
                await page.wait_for_load_state("networkidle", timeout=timeout_ms)
            except PlaywrightTimeoutError:
                logger.warning(f"Network never went idle for {url}, extracting anyway")
            load_time_ms = int((time.monotonic() - started) * 1000)

            if cancel_token:
                cancel_token.raise_if_cancelled()

            if selector:
                try:
                    await page.wait_for_selector(selector, timeout=timeout_ms)
                except PlaywrightTimeoutError as e:
                    raise RenderError(url, selector, timeout_ms) from e

            if settle_delay:
                await asyncio.sleep(settle_delay)

            if cancel_token:
                cancel_token.raise_if_cancelled()

            raw = await page.evaluate(EXTRACT_PAGE_DATA_JS)
            vitals = await self._collect_web_vitals(page) if collect_vitals else WebVitals()

            snapshot = build_snapshot(
                raw,
                requested_url=url,
                status_code=response.status,
                load_time_ms=load_time_ms,
                resources=counter.snapshot(),
                web_vitals=vitals,
            )
            logger.info(
                f"Extracted {url}: {len(snapshot.links)} links, "
                f"{len(snapshot.images)} images in {load_time_ms}ms"
            )
            return snapshot
        finally:
            await self._release(context, page, counter)

    async def _collect_web_vitals(self, page: Page) -> WebVitals:
        """Vitals are best effort and never fail the crawl"""
        try:
            data = await page.evaluate(CORE_WEB_VITALS_JS)
        except PlaywrightError as e:
            logger.debug(f"Could not collect Core Web Vitals: {e}")
            return WebVitals()
        vitals = WebVitals()
        if isinstance(data, dict):
            values = {
                key: float(data[key])
                for key in ("lcp", "fid", "cls", "fcp", "ttfb")
                if isinstance(data.get(key), (int, float))
            }
            vitals = replace(vitals, **values)
        return vitals

    async def _release(self, context: BrowserContext, page: Page | None, counter) -> None:
        if page is not None:
            try:
                counter.detach(page)
            except (KeyError, ValueError) as e:
                logger.debug(f"Listener already detached: {e}")
        try:
            await context.close()
        except PlaywrightError as e:
            logger.debug(f"Error closing browser context: {e}")

    async def close(self):
        """Shut down the browser process."""
        try:
            if self._browser:
                await self._browser.close()
        except PlaywrightError as e:
            logger.debug(f"Error closing browser: {e}")
        finally:
            self._browser = None
        try:
            if self._playwright:
                await self._playwright.stop()
        except PlaywrightError as e:
            logger.debug(f"Error stopping playwright: {e}")
        finally:
            self._playwright = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
