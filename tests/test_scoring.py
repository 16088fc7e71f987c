"""Tests for risk scoring and recommendations."""

from itertools import product

import pytest

from sitelens.models import (
    FindingType,
    PerformanceScores,
    RiskLevel,
    SecurityFinding,
    Severity,
    TechnicalSignals,
    WordPressProfile,
)
from sitelens.scoring import (
    aggregate,
    calculate_risk_score,
    generate_recommendations,
    risk_level_for,
)
from sitelens.scoring.engine import FILLER_RECOMMENDATIONS, REC_CDN, REC_SSL

GOOD_SIGNALS = TechnicalSignals(has_ssl=True, has_cdn=True, caching="enabled", image_optimization="good")
GOOD_SCORES = PerformanceScores(performance_score=95, mobile_score=90)
NOT_WORDPRESS = WordPressProfile()

WP_FINDING = SecurityFinding(
    type=FindingType.CONFIG,
    severity=Severity.MEDIUM,
    title="XML-RPC Enabled",
    description="XML-RPC is enabled",
    recommendation="Disable XML-RPC",
)


class TestRiskLevel:
    @pytest.mark.parametrize(
        "score, level",
        [
            (0, RiskLevel.LOW),
            (2, RiskLevel.LOW),
            (3, RiskLevel.MEDIUM),
            (4, RiskLevel.MEDIUM),
            (5, RiskLevel.HIGH),
            (6, RiskLevel.HIGH),
            (7, RiskLevel.CRITICAL),
            (15, RiskLevel.CRITICAL),
        ],
    )
    def test_thresholds(self, score, level):
        assert risk_level_for(score) == level


class TestRiskScore:
    def test_healthy_site(self):
        assert calculate_risk_score(GOOD_SIGNALS, NOT_WORDPRESS, GOOD_SCORES) == 0

    def test_everything_wrong(self):
        signals = TechnicalSignals()
        profile = WordPressProfile(
            is_wordpress=True, plugins=tuple(f"p{i}" for i in range(21))
        )
        scores = PerformanceScores(performance_score=40, mobile_score=30)

        # performance 3, ssl 3, cdn 1, caching 2, plugins 2, unknown version 2, mobile 2
        assert calculate_risk_score(signals, profile, scores) == 15

    def test_current_wordpress_version_adds_nothing(self):
        profile = WordPressProfile(is_wordpress=True, version="6.5", is_version_outdated=False)
        assert calculate_risk_score(GOOD_SIGNALS, profile, GOOD_SCORES) == 0

    @pytest.mark.parametrize(
        "performance, mobile, expected",
        [(75, 90, 1), (65, 90, 2), (45, 90, 3), (95, 65, 1), (95, 45, 2)],
    )
    def test_score_bands(self, performance, mobile, expected):
        scores = PerformanceScores(performance_score=performance, mobile_score=mobile)
        assert calculate_risk_score(GOOD_SIGNALS, NOT_WORDPRESS, scores) == expected


class TestRecommendations:
    def test_healthy_site_gets_filler(self):
        recommendations = generate_recommendations(GOOD_SIGNALS, NOT_WORDPRESS, GOOD_SCORES)
        assert recommendations == FILLER_RECOMMENDATIONS

    def test_priority_order(self):
        signals = TechnicalSignals(has_ssl=False, has_cdn=False, caching="enabled")
        recommendations = generate_recommendations(signals, NOT_WORDPRESS, GOOD_SCORES)

        assert recommendations[:2] == [REC_CDN, REC_SSL]
        assert len(recommendations) == 3

    def test_length_bounds_over_all_conditions(self):
        for has_ssl, has_cdn, caching, images, wordpress, many_plugins, perf, headers, wp in product(
            [True, False],
            [True, False],
            ["enabled", "partial", "disabled"],
            ["good", "needs-improvement", "poor"],
            [True, False],
            [True, False],
            [95, 60],
            [(), ("content-security-policy",)],
            [(), (WP_FINDING,)],
        ):
            signals = TechnicalSignals(
                has_ssl=has_ssl, has_cdn=has_cdn, caching=caching, image_optimization=images
            )
            profile = WordPressProfile(
                is_wordpress=wordpress,
                plugins=tuple(f"p{i}" for i in range(25 if many_plugins else 2)),
            )
            scores = PerformanceScores(performance_score=perf, mobile_score=perf)

            recommendations = generate_recommendations(
                signals, profile, scores, missing_headers=headers, wordpress_findings=wp
            )

            assert 3 <= len(recommendations) <= 8
            assert len(set(recommendations)) == len(recommendations)

    @pytest.mark.parametrize("limit, expected", [(1, 3), (6, 6), (20, 8)])
    def test_limit_is_clamped(self, limit, expected):
        signals = TechnicalSignals(image_optimization="poor")
        profile = WordPressProfile(is_wordpress=True, plugins=tuple(f"p{i}" for i in range(25)))
        scores = PerformanceScores(performance_score=40, mobile_score=30)

        recommendations = generate_recommendations(
            signals,
            profile,
            scores,
            missing_headers=["x-frame-options"],
            wordpress_findings=[WP_FINDING],
            limit=limit,
        )

        assert len(recommendations) == expected


class TestAggregate:
    def test_assessment(self):
        signals = TechnicalSignals(has_ssl=False, has_cdn=False, caching="disabled")
        scores = PerformanceScores(performance_score=60, mobile_score=45)

        assessment = aggregate(
            signals, NOT_WORDPRESS, [WP_FINDING], scores, missing_headers=["x-frame-options"]
        )

        # performance 2, ssl 3, cdn 1, caching 2, mobile 2
        assert assessment.risk_score == 10
        assert assessment.risk_level == RiskLevel.CRITICAL
        assert 3 <= len(assessment.recommendations) <= 8
