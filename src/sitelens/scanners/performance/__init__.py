"""Performance estimator."""

from sitelens.scanners.performance.estimator import (
    PerformanceEstimator,
    estimate_desktop_score,
    estimate_scores,
)
from sitelens.scanners.performance.pagespeed import (
    PageSpeedClient,
    extract_performance_score,
)

__all__ = [
    "PageSpeedClient",
    "PerformanceEstimator",
    "estimate_desktop_score",
    "estimate_scores",
    "extract_performance_score",
]
