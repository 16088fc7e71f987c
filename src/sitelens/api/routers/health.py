"""Health check endpoints."""

from fastapi import APIRouter, Request

from sitelens.version import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Liveness, plus which optional third-party integrations are configured."""
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "version": __version__,
        "integrations": {
            "builtwith": settings.get_builtwith_key() is not None,
            "pagespeed": settings.get_pagespeed_key() is not None,
        },
    }


@router.get("/")
async def root() -> dict:
    return {
        "name": "SiteLens API",
        "version": __version__,
        "analyze": "/api/v1/analyze",
        "docs": "/docs",
    }
