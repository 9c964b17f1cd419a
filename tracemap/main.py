"""
TraceMap FastAPI REST API Server

Serves the simulated OSINT exposure analyses consumed by the TraceMap web
client. No real data is collected; scores come from the submitted string.

Start: uvicorn tracemap.main:app --host 0.0.0.0 --port 5000
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from tracemap import __version__
from tracemap.ai.explainer import Explainer
from tracemap.core.config import settings
from tracemap.core.constants import FAILSAFE_EMAIL_RESPONSE, MODULE_ENDPOINTS, ModuleType
from tracemap.core.exceptions import AuthorizationError, TraceMapError, ValidationError
from tracemap.core.logging import get_logger, setup_logging
from tracemap.engine.analyzer import AnalysisService
from tracemap.models import (
    EmailAnalysisRequest,
    EmailAnalysisResponse,
    ErrorResponse,
    ModuleAnalysisRequest,
    ModuleAnalysisResponse,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    setup_logging(settings.log_level, settings.log_format, settings.log_dir)
    logger.info("tracemap_api_starting", version=__version__, provider=settings.ai_provider)

    if not settings.provider_configured():
        logger.warning(
            "explanation_provider_unconfigured",
            provider=settings.ai_provider,
            setting=settings.provider_key_name(),
        )

    yield

    logger.info("tracemap_api_shutdown")


app = FastAPI(
    title="TraceMap OSINT Exposure API",
    description="Simulated OSINT exposure scoring for emails and identifiers",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Dependencies ─────────────────────────────────────────────────

def get_explainer() -> Explainer:
    """Explanation collaborator; overridden with a fake in tests."""
    return Explainer.from_settings(settings)


def get_analysis_service(explainer: Explainer = Depends(get_explainer)) -> AnalysisService:
    return AnalysisService(explainer, audit=settings.audit_log_enabled)


# ── Error handlers ───────────────────────────────────────────────

@app.exception_handler(TraceMapError)
async def tracemap_error_handler(request: Request, exc: TraceMapError) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, status=exc.status_code, error=str(exc))
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_malformed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=422, content={"error": "Malformed request body"})


# ── Response Models ──────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    services: dict[str, bool]
    provider: str
    version: str = __version__


_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


# ── Flagship analysis ────────────────────────────────────────────

@app.post(
    "/analyze-email",
    tags=["Analysis"],
    response_model=None,
    responses={200: {"model": EmailAnalysisResponse}, **_ERROR_RESPONSES},
)
async def analyze_email(
    body: Any = Body(default=None),
    service: AnalysisService = Depends(get_analysis_service),
) -> dict[str, Any]:
    """
    Four-signal exposure analysis of an email address.

    The body is validated inside the catch-all, so a wrongly typed field is
    reported like any other unexpected failure: a minimal LOW-risk result
    rather than an HTTP error.
    """
    try:
        request = EmailAnalysisRequest.model_validate(body if body is not None else {})
        result = await service.analyze_email(request)
        return result.model_dump(mode="json")
    except (AuthorizationError, ValidationError):
        raise
    except Exception:
        logger.exception("email_analysis_failed")
        return dict(FAILSAFE_EMAIL_RESPONSE)


@app.post("/analyze", tags=["Analysis"])
async def analyze_alias() -> RedirectResponse:
    """Alias kept for older clients; the 307 preserves method and body."""
    return RedirectResponse(url="/analyze-email", status_code=307)


# ── Module analyses ──────────────────────────────────────────────

@app.post(
    "/analyze/text-osint",
    tags=["Modules"],
    response_model=ModuleAnalysisResponse,
    responses=_ERROR_RESPONSES,
)
async def analyze_text(
    body: ModuleAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> ModuleAnalysisResponse:
    return await service.analyze_module(body, ModuleType.TEXT)


@app.post(
    "/analyze/image-osint",
    tags=["Modules"],
    response_model=ModuleAnalysisResponse,
    responses=_ERROR_RESPONSES,
)
async def analyze_image(
    body: ModuleAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> ModuleAnalysisResponse:
    return await service.analyze_module(body, ModuleType.IMAGE)


@app.post(
    "/analyze/location-osint",
    tags=["Modules"],
    response_model=ModuleAnalysisResponse,
    responses=_ERROR_RESPONSES,
)
async def analyze_location(
    body: ModuleAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> ModuleAnalysisResponse:
    return await service.analyze_module(body, ModuleType.LOCATION)


@app.post(
    "/analyze/code-osint",
    tags=["Modules"],
    response_model=ModuleAnalysisResponse,
    responses=_ERROR_RESPONSES,
)
async def analyze_code(
    body: ModuleAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> ModuleAnalysisResponse:
    return await service.analyze_module(body, ModuleType.CODE)


# ── System ───────────────────────────────────────────────────────

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check() -> HealthResponse:
    """Report whether scoring and the explanation provider are usable."""
    services = {
        "scoring": True,
        "explanation_provider": settings.enable_ai_explanations and settings.provider_configured(),
    }
    return HealthResponse(
        status="healthy" if all(services.values()) else "degraded",
        services=services,
        provider=settings.ai_provider,
    )


@app.get("/modules", tags=["System"])
async def list_modules() -> list[dict[str, str]]:
    """List the specialised analysis modules and their endpoints."""
    return [
        {"module": module.value, "endpoint": endpoint}
        for module, endpoint in MODULE_ENDPOINTS.items()
    ]


@app.get("/", tags=["System"])
async def root() -> dict[str, str]:
    return {
        "name": "TraceMap OSINT Exposure API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
