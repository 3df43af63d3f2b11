from __future__ import annotations

import logging
from dataclasses import dataclass

from playwright.async_api import Page

from .errors import NavigationError

logger = logging.getLogger(__name__)

NAV_TIMEOUT_MS = 60000

# Tried in order; the first attempt that returns an ok response wins.
# Pages holding long-lived connections never go idle, hence the DOM-ready tier.
WAIT_LADDER: tuple[str, ...] = ("networkidle", "domcontentloaded")


@dataclass(frozen=True)
class NavigationResult:
    final_url: str
    status: int | None
    wait_until: str


async def load(page: Page, url: str, *, timeout_ms: int = NAV_TIMEOUT_MS) -> NavigationResult:
    """Navigate ``page`` to ``url`` walking the wait ladder.

    Raises NavigationError with the last known status once every tier has
    thrown or answered with a non-ok response.
    """
    status: int | None = None
    reason: str | None = None

    for wait_until in WAIT_LADDER:
        try:
            resp = await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except Exception as e:
            reason = str(e).splitlines()[0] if str(e) else type(e).__name__
            logger.warning("navigation failed url=%s wait_until=%s: %s", url, wait_until, reason)
            continue

        if resp is None:
            reason = "no response"
            logger.warning("navigation returned no response url=%s wait_until=%s", url, wait_until)
            continue

        status = resp.status
        if not resp.ok:
            reason = f"HTTP {status}"
            logger.warning("navigation not ok url=%s wait_until=%s status=%s", url, wait_until, status)
            continue

        return NavigationResult(
            final_url=page.url,
            status=status,
            wait_until=wait_until,
        )

    raise NavigationError(url, status=status, reason=reason)
