"""Analysis coordinator for orchestrating the page scanners."""

import asyncio
import random
from collections.abc import Awaitable
from datetime import datetime
from typing import Literal, TypeVar

import httpx

from sitelens.core.config import Settings, get_settings
from sitelens.core.exceptions import RateLimitError
from sitelens.core.interfaces import ICache, IRateLimiter
from sitelens.core.logging import get_logger
from sitelens.infrastructure.cache import MemoryCache
from sitelens.infrastructure.fetcher import Fetcher, validate_url
from sitelens.infrastructure.http import HTTPClient, check_target_allowed
from sitelens.infrastructure.ratelimit import ClientRateLimiter
from sitelens.models import (
    AnalysisResult,
    PerformanceScores,
    Technology,
    TechnicalSignals,
    WebSecurityResult,
    WordPressScanResult,
)
from sitelens.scanners.performance import PageSpeedClient, PerformanceEstimator
from sitelens.scanners.performance.pagespeed import Sleep
from sitelens.scanners.performance.estimator import estimate_scores
from sitelens.scanners.security import WebSecurityScanner
from sitelens.scanners.webtech import TechnologyDetector, extract_signals
from sitelens.scanners.wordpress import WordPressAnalyzer
from sitelens.scoring import aggregate

T = TypeVar("T")

RATE_LIMIT_RETRY_AFTER = 60


class AnalysisCoordinator:
    """Runs the full analysis pipeline for one URL at a time.

    The cache and rate limiter are injected so that several coordinators can
    share them; each analysis opens its own HTTP client.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache: ICache | None = None,
        rate_limiter: IRateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.settings = settings or get_settings()
        self.cache = cache if cache is not None else MemoryCache()
        self.rate_limiter = (
            rate_limiter
            if rate_limiter is not None
            else ClientRateLimiter(
                self.settings.rate_limit_per_minute,
                max_clients=self.settings.rate_limit_max_clients,
            )
        )
        self.transport = transport
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.logger = get_logger("coordinator")

    async def analyze(self, raw_url: str, client_id: str = "local") -> AnalysisResult:
        """Analyze a URL and return the final report.

        Raises:
            RateLimitError: client exceeded its quota
            InvalidUrlError: malformed or oversized URL
            ForbiddenTargetError: internal or private target
            FetchFailedError: page could not be fetched directly or via proxy
            InsufficientContentError: page too small to analyze
        """
        if not await self.rate_limiter.check(client_id):
            self.logger.warning("rate_limit_exceeded", client_id=client_id)
            raise RateLimitError(
                "Rate limit exceeded. Please try again later.",
                retry_after=RATE_LIMIT_RETRY_AFTER,
                details={"client_id": client_id},
            )

        target = validate_url(raw_url, self.settings)
        if self.settings.ssrf_resolve_dns:
            await check_target_allowed(target.hostname)

        cache_key = f"analysis:{target.url}"
        cached = await self.cache.get(cache_key)
        if cached is not None:
            self.logger.info("analysis_cache_hit", url=target.url)
            return cached.model_copy(update={"cached": True}, deep=True)

        self.logger.info("analysis_started", url=target.url, client_id=client_id)

        async with HTTPClient(self.settings, transport=self.transport) as http:
            page = await Fetcher(http, self.settings).fetch(target.url)
            signals = extract_signals(page)

            errors: list[str] = []
            technologies, wordpress, security = await asyncio.gather(
                self._run_stage(
                    "webtech",
                    TechnologyDetector(http, self.settings).scan(page),
                    [],
                    errors,
                ),
                self._run_stage(
                    "wordpress",
                    WordPressAnalyzer(http, self.settings).scan(page),
                    WordPressScanResult(target=page.url),
                    errors,
                ),
                self._run_stage(
                    "security",
                    WebSecurityScanner(http, self.settings).scan(page),
                    WebSecurityResult(target=page.url),
                    errors,
                ),
            )

            profile = wordpress.profile
            estimator = PerformanceEstimator(
                PageSpeedClient(http, self.settings, sleep=self.sleep),
                self.settings,
                rng=self.rng,
                sleep=self.sleep,
            )
            scores = await self._run_stage(
                "performance",
                estimator.estimate(
                    page.url,
                    signals,
                    plugin_count=profile.plugin_count,
                    is_wordpress=profile.is_wordpress,
                ),
                None,
                errors,
            )
            if scores is None:
                scores = self._fallback_scores(signals, profile.plugin_count, profile.is_wordpress)

        findings = [*security.findings, *wordpress.findings]
        assessment = aggregate(
            signals,
            profile,
            findings,
            scores,
            missing_headers=security.missing_headers,
            wordpress_findings=wordpress.findings,
            max_recommendations=self.settings.max_recommendations,
        )

        result = AnalysisResult(
            url=page.url,
            performance_score=scores.performance_score,
            mobile_score=scores.mobile_score,
            is_wordpress=profile.is_wordpress,
            wp_version=profile.version,
            theme=profile.theme,
            plugins=profile.plugin_count if profile.is_wordpress else None,
            has_ssl=signals.has_ssl,
            has_cdn=signals.has_cdn,
            image_optimization=signals.image_optimization,
            caching=signals.caching,
            technologies=technologies,
            security_findings=findings,
            wp_security_issues=wordpress.findings,
            missing_security_headers=security.missing_headers,
            overall_security_score=security.security_score,
            risk_level=assessment.risk_level,
            recommendations=assessment.recommendations,
            data_source="real" if scores.using_real_data else "estimated",
            confidence=self._confidence(scores, technologies, errors),
            analysis_timestamp=datetime.utcnow(),
            errors=errors,
        )

        await self.cache.set(
            cache_key, result.model_copy(deep=True), ttl=self.settings.cache_ttl_seconds
        )

        self.logger.info(
            "analysis_completed",
            url=result.url,
            risk_level=result.risk_level.value,
            security_score=result.overall_security_score,
            findings=result.total_findings,
            data_source=result.data_source,
            confidence=result.confidence,
            errors=len(errors),
        )
        return result

    def remaining_requests(self, client_id: str) -> int:
        return self.rate_limiter.remaining(client_id)

    async def _run_stage(
        self,
        name: str,
        stage: Awaitable[T],
        fallback: T,
        errors: list[str],
    ) -> T:
        """Await a pipeline stage; a crash is logged and replaced by fallback."""
        try:
            return await stage
        except Exception as e:
            self.logger.error("analysis_stage_failed", stage=name, error=str(e), exc_info=True)
            errors.append(f"{name}: {e}")
            return fallback

    def _fallback_scores(
        self, signals: TechnicalSignals, plugin_count: int, is_wordpress: bool
    ) -> PerformanceScores:
        desktop, mobile = estimate_scores(signals, plugin_count, is_wordpress, self.rng)
        return PerformanceScores(performance_score=desktop, mobile_score=mobile)

    def _confidence(
        self,
        scores: PerformanceScores,
        technologies: list[Technology],
        errors: list[str],
    ) -> Literal["high", "medium", "low"]:
        if errors:
            return "low"
        if scores.using_real_data:
            return "high"
        # a configured PageSpeed key that yielded nothing is a failed enrichment
        if self.settings.get_pagespeed_key() is not None:
            return "low"
        if not technologies:
            return "low"
        return "medium"
