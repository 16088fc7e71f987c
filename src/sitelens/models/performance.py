"""Performance score models."""

from typing import Literal

from pydantic import Field

from sitelens.models.base import BaseSchema

ScoreSource = Literal["pagespeed", "estimated"]
Strategy = Literal["desktop", "mobile"]


class PageSpeedOutcome(BaseSchema):
    """Result of one PageSpeed Insights strategy request."""

    strategy: Strategy
    score: int | None = Field(default=None, ge=0, le=100)
    attempts: int = 0
    error: str | None = None


class PerformanceScores(BaseSchema):
    """Desktop and mobile performance scores."""

    performance_score: int = Field(ge=0, le=100)
    mobile_score: int = Field(ge=0, le=100)
    using_real_data: bool = False
    desktop_source: ScoreSource = "estimated"
    mobile_source: ScoreSource = "estimated"
