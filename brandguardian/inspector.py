from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from playwright.async_api import Page

from .models import DistortedImage

DISTORTION_THRESHOLD = 0.03

_QUOTES = "'\""

# Raw computed font-family of every element.
FONT_FAMILIES_JS = """
() => Array.from(document.querySelectorAll('*'), (el) => getComputedStyle(el).fontFamily || '')
"""

# Natural and rendered size of every image.
IMAGE_MEASUREMENTS_JS = """
() => Array.from(document.images, (img) => ({
  src: img.currentSrc || img.src,
  naturalWidth: img.naturalWidth,
  naturalHeight: img.naturalHeight,
  clientWidth: img.clientWidth,
  clientHeight: img.clientHeight,
}))
"""


def normalize_family(raw: str | None) -> str | None:
    """First declared family of a CSS font-family value, unquoted and lowercased."""
    if not raw:
        return None
    first = raw.split(",")[0].strip().strip(_QUOTES).strip().lower()
    return first or None


def _round_half_up(value: float, step: str) -> float:
    # Ties go up, unlike round(), so 1.0625 reads 1.063.
    return float(Decimal(str(value)).quantize(Decimal(step), rounding=ROUND_HALF_UP))


def unique_families(values: Iterable[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        fam = normalize_family(value)
        if fam:
            seen.setdefault(fam, None)
    return list(seen)


def find_distortions(
    measurements: Iterable[dict[str, Any]],
    threshold: float = DISTORTION_THRESHOLD,
) -> list[DistortedImage]:
    """Images whose rendered aspect ratio drifts from the natural one by more than ``threshold``.

    Images lacking any of the four dimensions (unloaded, zero sized) are skipped.
    """
    out: list[DistortedImage] = []
    for m in measurements:
        nw = m.get("naturalWidth") or 0
        nh = m.get("naturalHeight") or 0
        cw = m.get("clientWidth") or 0
        ch = m.get("clientHeight") or 0
        if not (nw and nh and cw and ch):
            continue
        natural_ar = nw / nh
        render_ar = cw / ch
        delta = abs(render_ar - natural_ar) / natural_ar
        if delta > threshold:
            out.append(
                DistortedImage(
                    src=m.get("src") or "",
                    naturalAR=_round_half_up(natural_ar, "0.001"),
                    renderAR=_round_half_up(render_ar, "0.001"),
                    deltaPct=_round_half_up(delta * 100, "0.1"),
                )
            )
    return out


async def extract_font_families(page: Page) -> list[str]:
    raw = await page.evaluate(FONT_FAMILIES_JS)
    return unique_families(raw or [])


async def extract_distorted_images(page: Page, threshold: float = DISTORTION_THRESHOLD) -> list[DistortedImage]:
    raw = await page.evaluate(IMAGE_MEASUREMENTS_JS)
    return find_distortions(raw or [], threshold)
