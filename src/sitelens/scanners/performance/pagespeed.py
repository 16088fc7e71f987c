"""PageSpeed Insights client."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from sitelens.core.config import Settings, get_settings
from sitelens.core.logging import get_logger
from sitelens.infrastructure.http import HTTPClient
from sitelens.models import PageSpeedOutcome
from sitelens.models.performance import Strategy

# Backoff after transport errors
ERROR_BACKOFF_BASE = 1.5
ERROR_BACKOFF_CAP = 6.0

Sleep = Callable[[float], Awaitable[None]]


def extract_performance_score(data: Any) -> int | None:
    """``lighthouseResult.categories.performance.score`` scaled to 0..100."""
    try:
        score = data["lighthouseResult"]["categories"]["performance"]["score"]
    except (KeyError, TypeError):
        return None
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    return max(0, min(100, round(score * 100)))


class PageSpeedClient:
    """Fetches one strategy score with bounded retries.

    Every failure mode ends in a miss (``score=None``); nothing is raised.
    """

    def __init__(
        self,
        http: HTTPClient,
        settings: Settings | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.http = http
        self.settings = settings or get_settings()
        self.sleep = sleep
        self.logger = get_logger("pagespeed")

    @property
    def enabled(self) -> bool:
        return self.settings.get_pagespeed_key() is not None

    async def fetch_score(self, url: str, strategy: Strategy) -> PageSpeedOutcome:
        api_key = self.settings.get_pagespeed_key()
        if not api_key:
            return PageSpeedOutcome(strategy=strategy, error="API key not configured")

        params = {
            "url": url,
            "category": "performance",
            "strategy": strategy,
            "key": api_key,
        }
        max_attempts = self.settings.pagespeed_max_attempts
        error = "Max retries exceeded"

        for attempt in range(1, max_attempts + 1):
            last_attempt = attempt == max_attempts
            try:
                response = await self.http.get(
                    self.settings.pagespeed_url,
                    params=params,
                    headers={"Accept": "application/json"},
                    timeout=self.settings.pagespeed_timeout,
                )
            except httpx.TimeoutException:
                self.logger.warning("pagespeed_timeout", strategy=strategy, attempt=attempt)
                return PageSpeedOutcome(
                    strategy=strategy, attempts=attempt, error="Request timeout"
                )
            except httpx.HTTPError as e:
                error = str(e) or repr(e)
                self.logger.warning(
                    "pagespeed_request_failed",
                    strategy=strategy,
                    attempt=attempt,
                    error=error,
                )
                if not last_attempt:
                    await self.sleep(min(2**attempt * ERROR_BACKOFF_BASE, ERROR_BACKOFF_CAP))
                continue

            if response.status_code == 200:
                try:
                    score = extract_performance_score(response.json())
                except ValueError:
                    score = None
                if score is None:
                    self.logger.warning("pagespeed_score_missing", strategy=strategy)
                    return PageSpeedOutcome(
                        strategy=strategy,
                        attempts=attempt,
                        error="Missing score data in response",
                    )
                self.logger.info("pagespeed_score", strategy=strategy, score=score)
                return PageSpeedOutcome(strategy=strategy, score=score, attempts=attempt)

            if response.status_code == 429:
                wait = min(
                    2**attempt * self.settings.pagespeed_backoff_base,
                    self.settings.pagespeed_backoff_cap,
                )
                self.logger.info(
                    "pagespeed_rate_limited", strategy=strategy, attempt=attempt, wait=wait
                )
                error = "Rate limited"
                if not last_attempt:
                    await self.sleep(wait)
                continue

            error = f"HTTP {response.status_code}: {response.text[:200]}"
            self.logger.warning(
                "pagespeed_api_error",
                strategy=strategy,
                attempt=attempt,
                status=response.status_code,
            )
            if response.status_code == 400:
                return PageSpeedOutcome(strategy=strategy, attempts=attempt, error=error)

        return PageSpeedOutcome(strategy=strategy, attempts=max_attempts, error=error)
