"""End-to-end tests for the analysis coordinator."""

import random

import pytest

from conftest import ASTRA_HTML, PLAIN_HTML, MockSite, make_settings, no_sleep, respond
from sitelens.core.exceptions import (
    FetchFailedError,
    ForbiddenTargetError,
    InvalidUrlError,
    RateLimitError,
)
from sitelens.infrastructure import ClientRateLimiter, MemoryCache
from sitelens.models import RiskLevel
from sitelens.orchestration import AnalysisCoordinator
from sitelens.scanners.wordpress import WordPressAnalyzer

ASTRA_SITE = {
    ("GET", "/"): respond(
        200,
        text=ASTRA_HTML,
        headers={"Cache-Control": "max-age=3600", "ETag": '"abc"'},
    )
}


def coordinator_for(site: MockSite, settings=None, **kwargs) -> AnalysisCoordinator:
    return AnalysisCoordinator(
        settings or make_settings(),
        transport=site.transport,
        rng=random.Random(1),
        sleep=no_sleep,
        **kwargs,
    )


class TestAnalysisCoordinator:
    async def test_wordpress_site(self):
        site = MockSite(ASTRA_SITE)

        result = await coordinator_for(site).analyze("example.com")

        assert result.url == "https://example.com"
        assert result.is_wordpress
        assert result.theme == "Astra"
        assert result.plugins == 2
        assert result.wp_version is None
        assert result.has_ssl
        assert not result.has_cdn
        assert result.caching == "partial"
        assert [t.name for t in result.technologies] == ["WordPress"]

        assert len(result.missing_security_headers) == 7
        assert len(result.wp_security_issues) == 2
        assert result.total_findings == 7 + 2
        assert result.security_findings[-2:] == result.wp_security_issues
        assert result.overall_security_score == 100 - 15 - 15 - 8 - 8 - 3 - 3 - 3

        assert result.data_source == "estimated"
        assert result.confidence == "medium"
        assert 3 <= len(result.recommendations) <= 8
        assert result.errors == []
        assert not result.cached

    async def test_plain_site_has_low_confidence(self):
        site = MockSite({("GET", "/"): respond(200, text=PLAIN_HTML)})

        result = await coordinator_for(site).analyze("https://example.com")

        assert not result.is_wordpress
        assert result.plugins is None
        assert result.technologies == []
        assert result.confidence == "low"
        assert result.wp_security_issues == []

    async def test_real_performance_data(self):
        settings = make_settings(pagespeed_api_key="key")
        lighthouse = {"lighthouseResult": {"categories": {"performance": {"score": 0.9}}}}
        site = MockSite(
            {
                **ASTRA_SITE,
                "/pagespeedonline/v5/runPagespeed": respond(200, json=lighthouse),
            }
        )

        result = await coordinator_for(site, settings).analyze("example.com")

        assert result.performance_score == 90
        assert result.mobile_score == 90
        assert result.data_source == "real"
        assert result.confidence == "high"

    async def test_failed_pagespeed_lowers_confidence(self):
        settings = make_settings(pagespeed_api_key="key")
        site = MockSite(
            {**ASTRA_SITE, "/pagespeedonline/v5/runPagespeed": respond(400, text="bad")}
        )

        result = await coordinator_for(site, settings).analyze("example.com")

        assert result.data_source == "estimated"
        assert result.technologies
        assert result.errors == []
        assert result.confidence == "low"

    async def test_second_request_is_served_from_cache(self):
        site = MockSite(ASTRA_SITE)
        coordinator = coordinator_for(site)

        first = await coordinator.analyze("example.com")
        request_count = len(site.requests)
        second = await coordinator.analyze("https://example.com")

        assert not first.cached
        assert second.cached
        assert second.url == first.url
        assert second.overall_security_score == first.overall_security_score
        assert len(site.requests) == request_count

    async def test_cache_is_shared_between_coordinators(self):
        cache = MemoryCache()
        site = MockSite(ASTRA_SITE)
        first, second = coordinator_for(site, cache=cache), coordinator_for(site, cache=cache)

        assert first.cache is cache
        assert second.cache is cache

        await first.analyze("example.com")
        result = await second.analyze("example.com")

        assert result.cached
        assert site.paths("GET").count("/") == 1

    async def test_empty_rate_limiter_is_kept(self):
        limiter = ClientRateLimiter(3)

        assert coordinator_for(MockSite(ASTRA_SITE), rate_limiter=limiter).rate_limiter is limiter

    async def test_cached_report_is_isolated_from_callers(self):
        coordinator = coordinator_for(MockSite(ASTRA_SITE))

        first = await coordinator.analyze("example.com")
        hit = await coordinator.analyze("example.com")
        hit.security_findings.clear()
        hit.recommendations.append("tampered")
        first.technologies.clear()
        again = await coordinator.analyze("example.com")

        assert again.security_findings == first.security_findings
        assert again.recommendations == first.recommendations
        assert [t.name for t in again.technologies] == ["WordPress"]

    async def test_rate_limit(self):
        site = MockSite(ASTRA_SITE)
        coordinator = coordinator_for(site, rate_limiter=ClientRateLimiter(1))

        await coordinator.analyze("example.com", client_id="203.0.113.7")
        with pytest.raises(RateLimitError) as exc_info:
            await coordinator.analyze("example.com", client_id="203.0.113.7")

        assert exc_info.value.retry_after == 60
        assert coordinator.remaining_requests("203.0.113.7") == 0

        # other clients keep their own quota
        result = await coordinator.analyze("example.com", client_id="198.51.100.1")
        assert result.cached

    @pytest.mark.parametrize("url", ["127.0.0.1", "http://192.168.0.1", "intranet.local"])
    async def test_forbidden_target_is_never_fetched(self, url):
        site = MockSite(ASTRA_SITE)

        with pytest.raises(ForbiddenTargetError):
            await coordinator_for(site).analyze(url)

        assert site.requests == []

    async def test_redirect_to_loopback_is_forbidden(self):
        site = MockSite(
            {
                ("GET", "/"): respond(
                    302, headers={"Location": "http://127.0.0.1:8080/internal"}
                ),
                "/internal": respond(200, text=ASTRA_HTML),
            }
        )
        coordinator = coordinator_for(site)

        with pytest.raises(ForbiddenTargetError):
            await coordinator.analyze("example.com")

        assert all(r.url.host == "example.com" for r in site.requests)
        assert await coordinator.cache.get("analysis:https://example.com") is None

    async def test_invalid_url(self):
        site = MockSite(ASTRA_SITE)

        with pytest.raises(InvalidUrlError):
            await coordinator_for(site).analyze("ftp://example.com")

        assert site.requests == []

    async def test_unreachable_site(self):
        site = MockSite(default=respond(502))

        with pytest.raises(FetchFailedError):
            await coordinator_for(site).analyze("example.com")

    async def test_failed_stage_degrades_report(self, monkeypatch):
        async def crash(self, page):
            raise RuntimeError("boom")

        monkeypatch.setattr(WordPressAnalyzer, "scan", crash)
        site = MockSite(ASTRA_SITE)

        result = await coordinator_for(site).analyze("example.com")

        assert result.errors == ["wordpress: boom"]
        assert result.confidence == "low"
        assert not result.is_wordpress
        assert result.wp_security_issues == []
        # the other stages still ran
        assert len(result.missing_security_headers) == 7
        assert [t.name for t in result.technologies] == ["WordPress"]

    async def test_insecure_site_risk(self):
        site = MockSite({("GET", "/"): respond(200, text=PLAIN_HTML)})

        result = await coordinator_for(site).analyze("http://example.com")

        assert not result.has_ssl
        assert result.total_findings == 8
        # ssl 3, cdn 1 and caching 2, plus the low estimated scores
        assert result.risk_level == RiskLevel.CRITICAL
