from __future__ import annotations

import base64
import logging
import secrets
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Any, Callable

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

from .config import Settings
from .errors import NavigationError, ServiceError
from .inspector import extract_distorted_images, extract_font_families
from .models import (
    AnalysisResult,
    AnalyzeRequest,
    ScreenshotMeta,
    ScreenshotRequest,
    ScreenshotResponse,
    Viewport,
)
from .navigator import load
from .scoring import score_page
from .session import Session, open_session


# Load a .env next to the package (local dev) before settings are read.
_HERE = Path(__file__).resolve()
load_dotenv(_HERE.parents[1] / ".env", override=False)

logger = logging.getLogger(__name__)

SessionFactory = Callable[[dict[str, int] | None], AbstractAsyncContextManager[Session]]

FALLBACK_WAIT_UNTIL = "domcontentloaded"
FALLBACK_JPEG_QUALITY = 50

router = APIRouter()


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _session_factory(request: Request) -> SessionFactory:
    return request.app.state.session_factory


def _screenshot_options(req: ScreenshotRequest) -> dict[str, Any]:
    opts: dict[str, Any] = {"type": req.type, "full_page": req.full_page}
    if req.type == "jpeg" and req.quality is not None:
        opts["quality"] = req.quality
    return opts


def _bad_request_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())[1:]) or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts) or "Invalid request body"


@router.get("/v1/health")
async def health():
    return {"ok": True}


@router.post("/v1/screenshot", response_model=ScreenshotResponse)
async def screenshot_endpoint(req: ScreenshotRequest, request: Request):
    settings = _settings(request)
    viewport = {"width": req.width, "height": req.height}
    try:
        async with _session_factory(request)(viewport) as session:
            nav = await load(session.page, req.url, timeout_ms=settings.nav_timeout_ms)
            title = await session.page.title()
            data = await session.page.screenshot(**_screenshot_options(req))
    except NavigationError as e:
        logger.warning("screenshot failed url=%s: %s", req.url, e)
        raise ServiceError(500, "screenshot_failed", str(e))
    except Exception as e:
        logger.exception("screenshot failed url=%s", req.url)
        raise ServiceError(500, "screenshot_failed", str(e))

    return ScreenshotResponse(
        title=title,
        image_base64=base64.b64encode(data).decode("ascii"),
        meta=ScreenshotMeta(
            url=req.url,
            finalUrl=nav.final_url,
            status=nav.status,
            waitUntil=nav.wait_until,
            type=req.type,
            fullPage=req.full_page,
            viewport=Viewport(**viewport),
        ),
    )


@router.post("/v1/analyze", response_model=AnalysisResult)
async def analyze_endpoint(req: AnalyzeRequest, request: Request):
    settings = _settings(request)
    url = req.target.value
    try:
        async with _session_factory(request)(None) as session:
            nav = await load(session.page, url, timeout_ms=settings.nav_timeout_ms)
            fonts = await extract_font_families(session.page)
            distorted = await extract_distorted_images(session.page)
    except Exception as e:
        logger.warning("analyze failed url=%s, capturing fallback screenshot: %s", url, e)
        raise await _blocked_fallback(request, url, e) from e

    result = score_page(fonts, distorted)
    result.meta.url = url
    result.meta.finalUrl = nav.final_url
    result.meta.status = nav.status
    result.meta.waitUntil = nav.wait_until
    return result


async def _blocked_fallback(request: Request, url: str, error: Exception) -> ServiceError:
    """Capture visual evidence of a page that could not be analyzed.

    Returns a 502 analyze_blocked error carrying the screenshot, or a 500
    analyze_failed error when even the fallback capture fails.
    """
    settings = _settings(request)
    try:
        async with _session_factory(request)(None) as session:
            resp = await session.page.goto(
                url, wait_until=FALLBACK_WAIT_UNTIL, timeout=settings.nav_timeout_ms
            )
            data = await session.page.screenshot(
                type="jpeg", quality=FALLBACK_JPEG_QUALITY, full_page=False
            )
    except Exception as fallback_error:
        logger.exception("analyze fallback failed url=%s", url)
        return ServiceError(
            500,
            "analyze_failed",
            str(error),
            fallback_error=str(fallback_error),
        )

    return ServiceError(
        502,
        "analyze_blocked",
        str(error),
        screenshot_base64=base64.b64encode(data).decode("ascii"),
        meta={
            "url": url,
            "status": resp.status if resp is not None else None,
            "type": "jpeg",
        },
    )


def create_app(settings: Settings, session_factory: SessionFactory = open_session) -> FastAPI:
    app = FastAPI(title="BrandGuardian", version="0.1.0")
    app.state.settings = settings
    app.state.session_factory = session_factory

    @app.exception_handler(ServiceError)
    async def _service_error(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"code": "bad_request", "message": _bad_request_message(exc)},
        )

    # Registered before CORS so that 401 responses still carry CORS headers.
    @app.middleware("http")
    async def _require_api_key(request: Request, call_next):
        if settings.api_key:
            header = request.headers.get("authorization", "")
            expected = f"Bearer {settings.api_key}"
            if not secrets.compare_digest(header.encode(), expected.encode()):
                return JSONResponse(
                    status_code=401,
                    content={"code": "unauthorized", "message": "Missing or invalid bearer token"},
                )
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


def run() -> None:
    import uvicorn

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("BrandGuardian listening on :%s", settings.port)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
