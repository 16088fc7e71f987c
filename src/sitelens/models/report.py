"""Risk assessment and final analysis report models."""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from sitelens.models.base import BaseSchema, FrozenSchema, RiskLevel, Severity
from sitelens.models.security import SecurityFinding
from sitelens.models.webtech import CachingLevel, ImageOptimization, Technology


class RiskAssessment(BaseSchema):
    """Aggregated risk score, level and recommendations."""

    risk_score: int = Field(default=0, ge=0)
    risk_level: RiskLevel = RiskLevel.LOW
    recommendations: list[str] = Field(default_factory=list)


class AnalysisResult(FrozenSchema):
    """Final report for one analyzed URL."""

    url: str

    # Performance
    performance_score: int = Field(ge=0, le=100)
    mobile_score: int = Field(ge=0, le=100)

    # WordPress
    is_wordpress: bool = False
    wp_version: str | None = None
    theme: str | None = None
    plugins: int | None = None

    # Delivery signals
    has_ssl: bool = False
    has_cdn: bool = False
    image_optimization: ImageOptimization = "good"
    caching: CachingLevel = "disabled"

    technologies: list[Technology] = Field(default_factory=list)

    # Security
    security_findings: list[SecurityFinding] = Field(default_factory=list)
    wp_security_issues: list[SecurityFinding] = Field(default_factory=list)
    missing_security_headers: list[str] = Field(default_factory=list)
    overall_security_score: int = Field(default=100, ge=0, le=100)

    # Assessment
    risk_level: RiskLevel = RiskLevel.LOW
    recommendations: list[str] = Field(default_factory=list)
    data_source: Literal["real", "estimated"] = "estimated"
    confidence: Literal["high", "medium", "low"] = "medium"

    # Metadata
    analysis_timestamp: datetime = Field(default_factory=datetime.utcnow)
    cached: bool = False
    errors: list[str] = Field(default_factory=list)

    def findings_by_severity(self, severity: Severity) -> list[SecurityFinding]:
        return [f for f in self.security_findings if f.severity == severity]

    @property
    def total_findings(self) -> int:
        return len(self.security_findings)

    def to_json_dict(self) -> dict[str, Any]:
        """Export report as a JSON-compatible dictionary."""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Export report as JSON string."""
        return self.model_dump_json(indent=2)
