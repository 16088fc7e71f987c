"""Analysis API endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, Field

from sitelens.models import AnalysisResult
from sitelens.orchestration.coordinator import AnalysisCoordinator

router = APIRouter()


class AnalyzeRequest(BaseModel):
    """Request to analyze a website."""

    url: str = Field(examples=["example.com"])


def get_coordinator(request: Request) -> AnalysisCoordinator:
    """Shared coordinator so the cache and rate limiter span requests."""
    return request.app.state.coordinator


def client_ip(request: Request) -> str:
    """Client identity for rate limiting."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


@router.post("/analyze", response_model=AnalysisResult)
async def analyze_website(
    body: AnalyzeRequest,
    request: Request,
    response: Response,
    coordinator: AnalysisCoordinator = Depends(get_coordinator),
) -> AnalysisResult:
    """
    Analyze a website synchronously.

    Returns the full report; repeated requests for the same URL within the
    cache TTL are served from cache.
    """
    client_id = client_ip(request)
    result = await coordinator.analyze(body.url, client_id=client_id)
    response.headers["X-Rate-Limit-Remaining"] = str(
        coordinator.remaining_requests(client_id)
    )
    return result
