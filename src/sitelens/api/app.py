"""FastAPI application."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sitelens.api.routers import analysis, health
from sitelens.core.config import Settings, get_settings
from sitelens.core.exceptions import (
    FetchError,
    ForbiddenTargetError,
    InvalidUrlError,
    RateLimitError,
    SiteLensError,
)
from sitelens.core.logging import get_logger, setup_logging
from sitelens.orchestration.coordinator import AnalysisCoordinator
from sitelens.version import __version__

logger = get_logger("api")

ERROR_STATUS = [
    (InvalidUrlError, 400),
    (ForbiddenTargetError, 403),
    (RateLimitError, 429),
    (FetchError, 500),
]


def status_for(error: SiteLensError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


async def sitelens_error_handler(request: Request, exc: SiteLensError) -> JSONResponse:
    """Map domain errors to the JSON error envelope."""
    status = status_for(exc)
    headers = {}
    if isinstance(exc, RateLimitError):
        headers["Retry-After"] = str(int(exc.retry_after or 60))

    logger.info(
        "request_failed",
        path=request.url.path,
        status=status,
        error=exc.code,
        detail=exc.message,
    )
    return JSONResponse(
        status_code=status,
        content={"error": exc.code, "detail": exc.message},
        headers=headers,
    )


def create_app(
    settings: Settings | None = None,
    coordinator: AnalysisCoordinator | None = None,
) -> FastAPI:
    """Build the API application around a shared coordinator."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan handler."""
        setup_logging(settings.log_level, settings.log_format)
        yield

    app = FastAPI(
        title="SiteLens API",
        description="SiteLens - website technology, performance and security inspection",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.coordinator = coordinator or AnalysisCoordinator(settings)

    # CORS middleware - configured via CORS_ORIGINS environment variable
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SiteLensError, sitelens_error_handler)  # type: ignore[arg-type]

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(analysis.router, prefix="/api/v1", tags=["Analysis"])

    return app


app = create_app()
