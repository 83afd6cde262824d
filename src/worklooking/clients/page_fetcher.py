"""Headless-browser page fetcher (Playwright).

Uses a persistent browser profile so cookies from earlier logins are reused
across fetches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from worklooking.errors import FetchNetworkError

logger = logging.getLogger(__name__)

SELECTOR_TIMEOUT_MS = 30000


@dataclass
class PageContent:
    """Visible text of a rendered page plus where navigation ended."""
    text: str
    final_url: str
    page_title: str


class PageFetcher:
    """Renders a URL in headless Chromium and returns its visible text."""

    def __init__(
        self,
        profile_dir: str | Path | None = None,
        *,
        navigation_timeout_ms: int = 30000,
        selector_timeout_ms: int = SELECTOR_TIMEOUT_MS,
    ):
        self.profile_dir = Path(profile_dir).expanduser() if profile_dir else None
        self.navigation_timeout_ms = navigation_timeout_ms
        self.selector_timeout_ms = selector_timeout_ms

    async def fetch(self, url: str, wait_for_selector: str | None = None) -> PageContent:
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError
        from playwright.async_api import async_playwright

        logger.info("Fetching %s", url)
        try:
            async with async_playwright() as p:
                if self.profile_dir is not None:
                    self.profile_dir.mkdir(parents=True, exist_ok=True)
                    context = await p.chromium.launch_persistent_context(
                        str(self.profile_dir),
                        headless=True,
                        viewport={"width": 1200, "height": 800},
                    )
                    browser = None
                else:
                    browser = await p.chromium.launch(headless=True)
                    context = await browser.new_context(viewport={"width": 1200, "height": 800})
                try:
                    page = await context.new_page()
                    await page.goto(url, timeout=self.navigation_timeout_ms)

                    if wait_for_selector:
                        try:
                            await page.wait_for_selector(
                                wait_for_selector, timeout=self.selector_timeout_ms
                            )
                        except PlaywrightTimeoutError:
                            # Read whatever rendered so far
                            logger.warning(
                                "Selector %r not found within timeout", wait_for_selector
                            )

                    return PageContent(
                        text=await page.inner_text("body"),
                        final_url=page.url,
                        page_title=await page.title(),
                    )
                finally:
                    await context.close()
                    if browser is not None:
                        await browser.close()
        except PlaywrightError as exc:
            raise FetchNetworkError(str(exc)) from exc
