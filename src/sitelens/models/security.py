"""Security finding and web security scan models."""

from datetime import datetime

from pydantic import Field, field_validator

from sitelens.models.base import BaseSchema, FindingType, Severity


class SecurityFinding(BaseSchema):
    """A single security-relevant condition with remediation advice."""

    type: FindingType
    severity: Severity
    title: str
    description: str
    evidence: str | None = None
    recommendation: str
    cvss_score: float | None = Field(default=None, ge=0.0, le=10.0)
    cve_id: str | None = None

    @field_validator("recommendation")
    @classmethod
    def require_recommendation(cls, v: str) -> str:
        if not v:
            raise ValueError("Finding recommendation must not be empty")
        return v


class ProbeResult(BaseSchema):
    """Outcome of one active probe.

    A probe that errored keeps its error here for logging; callers treat it
    as not detected.
    """

    name: str
    detected: bool = False
    status_code: int | None = None
    evidence: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class SSLAnalysis(BaseSchema):
    """TLS posture inferred from the URL scheme and response headers."""

    has_ssl: bool = False
    tls_version: str | None = None
    certificate_valid: bool = True
    weak_ciphers: bool = False
    hsts: bool = False
    mixed_content_mitigation: bool = False


class VulnerabilityTests(BaseSchema):
    """Results of active vulnerability tests."""

    directory_traversal: bool = False


class WebSecurityResult(BaseSchema):
    """Complete web security scan result."""

    target: str
    security_score: int = Field(default=100, ge=0, le=100)
    missing_headers: list[str] = Field(default_factory=list)
    findings: list[SecurityFinding] = Field(default_factory=list)
    ssl_analysis: SSLAnalysis = Field(default_factory=SSLAnalysis)
    vulnerability_tests: VulnerabilityTests = Field(default_factory=VulnerabilityTests)
    exposed_paths: list[str] = Field(default_factory=list)
    probe_errors: list[str] = Field(default_factory=list)
    scanned_at: datetime = Field(default_factory=datetime.utcnow)
    duration_seconds: float = 0.0
