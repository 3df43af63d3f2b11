"""Browser-free doubles for the playwright page and the session factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import pytest

from brandguardian.inspector import FONT_FAMILIES_JS, IMAGE_MEASUREMENTS_JS
from brandguardian.session import Session

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16


class FakeResponse:
    def __init__(self, status: int) -> None:
        self.status = status

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class FakePage:
    """Replays ``outcomes`` for successive ``goto`` calls; the last one repeats."""

    def __init__(
        self,
        outcomes: list[Any] | None = None,
        *,
        fonts: list[str] | None = None,
        images: list[dict[str, Any]] | None = None,
        title: str = "Example Domain",
    ) -> None:
        self.outcomes = list(outcomes) if outcomes else [FakeResponse(200)]
        self.fonts = fonts or []
        self.images = images or []
        self._title = title
        self.url = "about:blank"
        self.gotos: list[tuple[str, str | None, int | None]] = []
        self.screenshots: list[dict[str, Any]] = []

    async def goto(self, url: str, wait_until: str | None = None, timeout: int | None = None):
        self.gotos.append((url, wait_until, timeout))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        self.url = url
        return outcome

    async def title(self) -> str:
        return self._title

    async def screenshot(self, **opts: Any) -> bytes:
        self.screenshots.append(opts)
        return JPEG_BYTES if opts.get("type") == "jpeg" else PNG_BYTES

    async def evaluate(self, script: str) -> Any:
        if script == FONT_FAMILIES_JS:
            return self.fonts
        if script == IMAGE_MEASUREMENTS_JS:
            return self.images
        raise AssertionError(f"unexpected script: {script!r}")


class FakeSessionFactory:
    """Hands out one queued page per session and counts teardowns."""

    def __init__(self, *pages: FakePage) -> None:
        self.pages = list(pages)
        self.viewports: list[dict[str, int] | None] = []
        self.closed = 0

    @asynccontextmanager
    async def __call__(self, viewport: dict[str, int] | None = None):
        if not self.pages:
            raise RuntimeError("browser launch failed")
        page = self.pages.pop(0)
        self.viewports.append(viewport)
        try:
            yield Session(browser=None, context=None, page=page)
        finally:
            self.closed += 1


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PORT", "API_KEY", "LOG_LEVEL", "BRANDGUARDIAN_CORS_ORIGINS", "BRANDGUARDIAN_NAV_TIMEOUT_MS"):
        monkeypatch.delenv(name, raising=False)
