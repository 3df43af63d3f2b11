from __future__ import annotations

from .models import AnalysisMeta, AnalysisResult, CategoryScores, DistortedImage, Finding

MAX_FAMILIES = 3
SCORE_FLOOR = 50
DISTORTED_IMAGE_PENALTY = 10
EXTRA_FAMILY_PENALTY = 5


def _clamp_score(score: int) -> int:
    return max(SCORE_FLOOR, min(100, int(score)))


def score_page(fonts: list[str], distorted: list[DistortedImage]) -> AnalysisResult:
    """Turn inspector output into a score, category tiers and findings.

    ``meta`` only carries what the inputs know; callers add navigation details.
    """
    findings: list[Finding] = []
    too_many_fonts = len(fonts) > MAX_FAMILIES

    if too_many_fonts:
        findings.append(
            Finding(
                id="B1",
                title="Too many font families",
                severity="medium",
                explanation=(
                    f"The page uses {len(fonts)} distinct font families; "
                    f"a consistent brand keeps to {MAX_FAMILIES} or fewer."
                ),
                evidence={
                    "families": list(fonts),
                    "total": len(fonts),
                    "recommended": f"<= {MAX_FAMILIES}",
                },
            )
        )

    for d in distorted:
        findings.append(
            Finding(
                id="A1",
                title="Possibly distorted image",
                severity="high",
                explanation=(
                    f"Rendered aspect ratio {d.renderAR} differs from the natural "
                    f"{d.naturalAR} by {d.deltaPct}%."
                ),
                evidence=d.model_dump(),
            )
        )

    extra_families = max(0, len(fonts) - MAX_FAMILIES)
    score = _clamp_score(
        100 - DISTORTED_IMAGE_PENALTY * len(distorted) - EXTRA_FAMILY_PENALTY * extra_families
    )

    return AnalysisResult(
        score=score,
        byCategory=CategoryScores(
            typography=70 if too_many_fonts else 95,
            logos=65 if distorted else 95,
        ),
        findings=findings,
        meta=AnalysisMeta(fontsDetected=list(fonts), distortedImages=len(distorted)),
    )
