from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT = {"width": 1366, "height": 768}

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

LOCALE = "es-CL"

# Runs before any page script so sites see a non-automated navigator.
HIDE_WEBDRIVER_JS = "Object.defineProperty(navigator, 'webdriver', { get: () => false });"

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
]


@dataclass(frozen=True)
class Session:
    browser: Browser
    context: BrowserContext
    page: Page


@asynccontextmanager
async def open_session(viewport: dict[str, int] | None = None) -> AsyncIterator[Session]:
    """Launch an isolated Chromium context with a single page.

    The browser is always closed when the block exits, whether it returns,
    raises, or is cancelled. Launch failures propagate unchanged.
    """
    viewport = dict(viewport or DEFAULT_VIEWPORT)
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True, args=_LAUNCH_ARGS)
        logger.debug("browser launched viewport=%sx%s", viewport["width"], viewport["height"])
        try:
            context = await browser.new_context(
                viewport=viewport,
                user_agent=USER_AGENT,
                locale=LOCALE,
                java_script_enabled=True,
            )
            await context.add_init_script(HIDE_WEBDRIVER_JS)
            page = await context.new_page()
            try:
                yield Session(browser=browser, context=context, page=page)
            finally:
                await context.close()
        finally:
            await browser.close()
            logger.debug("browser closed")
