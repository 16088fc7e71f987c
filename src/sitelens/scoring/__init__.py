"""Scoring and recommendation engine."""

from sitelens.scoring.engine import (
    FILLER_RECOMMENDATIONS,
    aggregate,
    calculate_risk_score,
    generate_recommendations,
    risk_level_for,
)

__all__ = [
    "FILLER_RECOMMENDATIONS",
    "aggregate",
    "calculate_risk_score",
    "generate_recommendations",
    "risk_level_for",
]
