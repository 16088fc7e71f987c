"""Technology detection and page signal models."""

from typing import Literal

from pydantic import Field

from sitelens.models.base import BaseSchema, FrozenSchema

CachingLevel = Literal["enabled", "partial", "disabled"]
ImageOptimization = Literal["good", "needs-improvement", "poor"]


class Technology(BaseSchema):
    """Detected web technology."""

    name: str
    confidence: int = Field(default=100, ge=0, le=100)
    version: str | None = None
    category: str = "Other"
    source: Literal["builtwith", "fingerprint"] = "fingerprint"


class TechnicalSignals(FrozenSchema):
    """Delivery signals derived from a fetched page."""

    has_ssl: bool = False
    has_cdn: bool = False
    caching: CachingLevel = "disabled"
    image_optimization: ImageOptimization = "good"
