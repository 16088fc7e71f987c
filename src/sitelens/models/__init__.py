"""Pydantic data models for SiteLens."""

from sitelens.models.base import (
    BaseSchema,
    FrozenSchema,
    FindingType,
    RiskLevel,
    Severity,
)
from sitelens.models.page import FetchedPage
from sitelens.models.target import AnalysisTarget, normalize_url
from sitelens.models.webtech import Technology, TechnicalSignals
from sitelens.models.security import (
    ProbeResult,
    SecurityFinding,
    SSLAnalysis,
    VulnerabilityTests,
    WebSecurityResult,
)
from sitelens.models.wordpress import WordPressProfile, WordPressScanResult
from sitelens.models.performance import PageSpeedOutcome, PerformanceScores
from sitelens.models.report import AnalysisResult, RiskAssessment

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",
    "FindingType",
    "RiskLevel",
    "Severity",
    # Page
    "FetchedPage",
    # Target
    "AnalysisTarget",
    "normalize_url",
    # Web Tech
    "Technology",
    "TechnicalSignals",
    # Security
    "ProbeResult",
    "SecurityFinding",
    "SSLAnalysis",
    "VulnerabilityTests",
    "WebSecurityResult",
    # WordPress
    "WordPressProfile",
    "WordPressScanResult",
    # Performance
    "PageSpeedOutcome",
    "PerformanceScores",
    # Report
    "AnalysisResult",
    "RiskAssessment",
]
