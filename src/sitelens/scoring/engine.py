"""Risk scoring and recommendation generation."""

from collections.abc import Sequence

from sitelens.core.logging import get_logger
from sitelens.models import (
    PerformanceScores,
    RiskAssessment,
    RiskLevel,
    SecurityFinding,
    TechnicalSignals,
    WordPressProfile,
)

logger = get_logger("scoring")

MIN_RECOMMENDATIONS = 3
MAX_RECOMMENDATIONS = 8

# Risk score thresholds, highest first
RISK_THRESHOLDS = [
    (7, RiskLevel.CRITICAL),
    (5, RiskLevel.HIGH),
    (3, RiskLevel.MEDIUM),
]

REC_PERFORMANCE = (
    "Improve page loading speed by optimizing images and reducing server response time"
)
REC_CDN = "Implement a Content Delivery Network (CDN) to improve global loading speeds"
REC_CACHING = "Enable caching to improve page load times and reduce server load"
REC_SSL = "Install an SSL certificate to secure your website and improve SEO ranking"
REC_WORDPRESS_UPDATES = (
    "Keep WordPress core, themes, and plugins updated for security and performance"
)
REC_WORDPRESS_PLUGINS = "Review and deactivate unnecessary plugins to improve performance"
REC_IMAGES = "Optimize images by compressing and using modern formats like WebP"
REC_SECURITY_HEADERS = "Implement missing security headers for better protection"
REC_WORDPRESS_SECURITY = "Address WordPress security vulnerabilities"

FILLER_RECOMMENDATIONS = [
    "Minify CSS, JavaScript, and HTML files to reduce file sizes",
    "Optimize database and remove unnecessary data",
    "Use a performance-optimized hosting provider",
]


def calculate_risk_score(
    signals: TechnicalSignals,
    profile: WordPressProfile,
    scores: PerformanceScores,
) -> int:
    """Additive risk score from performance, delivery and WordPress signals."""
    risk = 0

    if scores.performance_score < 50:
        risk += 3
    elif scores.performance_score < 70:
        risk += 2
    elif scores.performance_score < 80:
        risk += 1

    if not signals.has_ssl:
        risk += 3
    if not signals.has_cdn:
        risk += 1
    if signals.caching == "disabled":
        risk += 2

    if profile.is_wordpress:
        if profile.plugin_count > 20:
            risk += 2
        if not profile.version or profile.is_version_outdated:
            risk += 2

    if scores.mobile_score < 50:
        risk += 2
    elif scores.mobile_score < 70:
        risk += 1

    return risk


def risk_level_for(risk_score: int) -> RiskLevel:
    for threshold, level in RISK_THRESHOLDS:
        if risk_score >= threshold:
            return level
    return RiskLevel.LOW


def generate_recommendations(
    signals: TechnicalSignals,
    profile: WordPressProfile,
    scores: PerformanceScores,
    missing_headers: Sequence[str] = (),
    wordpress_findings: Sequence[SecurityFinding] = (),
    limit: int = MAX_RECOMMENDATIONS,
) -> list[str]:
    """Condition-driven recommendations in fixed priority order.

    Always returns between 3 and ``limit`` entries; generic advice fills the
    list up to the minimum.
    """
    limit = max(MIN_RECOMMENDATIONS, min(limit, MAX_RECOMMENDATIONS))
    candidates = []

    if scores.performance_score < 80:
        candidates.append(REC_PERFORMANCE)
    if not signals.has_cdn:
        candidates.append(REC_CDN)
    if signals.caching == "disabled":
        candidates.append(REC_CACHING)
    if not signals.has_ssl:
        candidates.append(REC_SSL)
    if profile.is_wordpress:
        candidates.append(REC_WORDPRESS_UPDATES)
        if profile.plugin_count > 20:
            candidates.append(REC_WORDPRESS_PLUGINS)
    if signals.image_optimization != "good":
        candidates.append(REC_IMAGES)
    if missing_headers:
        candidates.append(REC_SECURITY_HEADERS)
    if wordpress_findings:
        candidates.append(REC_WORDPRESS_SECURITY)

    recommendations = list(dict.fromkeys(candidates))

    for filler in FILLER_RECOMMENDATIONS:
        if len(recommendations) >= MIN_RECOMMENDATIONS:
            break
        if filler not in recommendations:
            recommendations.append(filler)

    return recommendations[:limit]


def aggregate(
    signals: TechnicalSignals,
    profile: WordPressProfile,
    findings: Sequence[SecurityFinding],
    scores: PerformanceScores,
    missing_headers: Sequence[str] = (),
    wordpress_findings: Sequence[SecurityFinding] = (),
    max_recommendations: int = MAX_RECOMMENDATIONS,
) -> RiskAssessment:
    """Combine all analysis outputs into a risk level and recommendations."""
    risk_score = calculate_risk_score(signals, profile, scores)
    assessment = RiskAssessment(
        risk_score=risk_score,
        risk_level=risk_level_for(risk_score),
        recommendations=generate_recommendations(
            signals,
            profile,
            scores,
            missing_headers=missing_headers,
            wordpress_findings=wordpress_findings,
            limit=max_recommendations,
        ),
    )

    logger.debug(
        "risk_assessed",
        risk_score=risk_score,
        risk_level=assessment.risk_level.value,
        findings=len(findings),
        recommendations=len(assessment.recommendations),
    )
    return assessment
