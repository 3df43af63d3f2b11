from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["medium", "high"]
ImageType = Literal["png", "jpeg"]


class ScreenshotRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(..., min_length=1)
    full_page: bool = Field(True, alias="fullPage")
    type: ImageType = Field("png")
    # Only honoured for jpeg; the engine rejects quality for png.
    quality: int | None = Field(None, ge=1, le=100)
    width: int = Field(1366, ge=100, le=4096)
    height: int = Field(768, ge=100, le=4096)


class Viewport(BaseModel):
    width: int
    height: int


class ScreenshotMeta(BaseModel):
    url: str
    finalUrl: str
    status: int | None
    waitUntil: str
    type: ImageType
    fullPage: bool
    viewport: Viewport


class ScreenshotResponse(BaseModel):
    ok: Literal[True] = True
    title: str
    image_base64: str
    meta: ScreenshotMeta


class AnalyzeTarget(BaseModel):
    value: str = Field(..., min_length=1)


class AnalyzeRequest(BaseModel):
    target: AnalyzeTarget


class DistortedImage(BaseModel):
    src: str
    naturalAR: float
    renderAR: float
    deltaPct: float


class Finding(BaseModel):
    id: str
    title: str
    severity: Severity
    explanation: str | None = None
    evidence: dict[str, Any]


class CategoryScores(BaseModel):
    typography: int
    logos: int


class AnalysisMeta(BaseModel):
    url: str | None = None
    finalUrl: str | None = None
    status: int | None = None
    waitUntil: str | None = None
    fontsDetected: list[str]
    distortedImages: int


class AnalysisResult(BaseModel):
    score: int
    byCategory: CategoryScores
    findings: list[Finding]
    meta: AnalysisMeta
