"""Performance score estimation."""

import asyncio
import random

from sitelens.core.config import Settings, get_settings
from sitelens.core.logging import get_logger
from sitelens.models import PerformanceScores, TechnicalSignals
from sitelens.scanners.performance.pagespeed import PageSpeedClient, Sleep

BASELINE_SCORE = 50

DESKTOP_MIN = 25
DESKTOP_MAX = 85
MOBILE_MIN = 20

# Inclusive range of the mobile penalty
MOBILE_PENALTY = (10, 19)


def estimate_desktop_score(
    signals: TechnicalSignals,
    plugin_count: int = 0,
    is_wordpress: bool = False,
) -> int:
    score = BASELINE_SCORE

    if signals.has_ssl:
        score += 5
    if signals.has_cdn:
        score += 8

    if signals.caching == "enabled":
        score += 10
    elif signals.caching == "partial":
        score += 5

    if signals.image_optimization == "good":
        score += 8
    elif signals.image_optimization == "needs-improvement":
        score += 3

    if plugin_count > 25:
        score -= 15
    elif plugin_count > 15:
        score -= 10
    elif plugin_count > 10:
        score -= 5

    if is_wordpress:
        score -= 8

    if not signals.has_ssl and not signals.has_cdn:
        score -= 5

    return min(max(score, DESKTOP_MIN), DESKTOP_MAX)


def estimate_scores(
    signals: TechnicalSignals,
    plugin_count: int = 0,
    is_wordpress: bool = False,
    rng: random.Random | None = None,
) -> tuple[int, int]:
    """Estimated (desktop, mobile) scores from page signals.

    The mobile penalty is random; pass a seeded ``rng`` for reproducible
    output.
    """
    rng = rng or random.Random()
    desktop = estimate_desktop_score(signals, plugin_count, is_wordpress)
    mobile = max(MOBILE_MIN, desktop - rng.randint(*MOBILE_PENALTY))
    return desktop, mobile


class PerformanceEstimator:
    """Real PageSpeed scores when configured, estimates otherwise."""

    def __init__(
        self,
        pagespeed: PageSpeedClient,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.pagespeed = pagespeed
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.logger = get_logger("performance")

    async def estimate(
        self,
        url: str,
        signals: TechnicalSignals,
        plugin_count: int = 0,
        is_wordpress: bool = False,
    ) -> PerformanceScores:
        desktop_estimate, mobile_estimate = estimate_scores(
            signals, plugin_count, is_wordpress, self.rng
        )

        if not self.pagespeed.enabled:
            self.logger.debug("pagespeed_disabled", url=url)
            return PerformanceScores(
                performance_score=desktop_estimate,
                mobile_score=mobile_estimate,
            )

        # Sequential with a fixed gap to stay under the API rate limit
        desktop = await self.pagespeed.fetch_score(url, "desktop")
        await self.sleep(self.settings.pagespeed_request_delay)
        mobile = await self.pagespeed.fetch_score(url, "mobile")

        scores = PerformanceScores(
            performance_score=desktop.score if desktop.score is not None else desktop_estimate,
            mobile_score=mobile.score if mobile.score is not None else mobile_estimate,
            using_real_data=desktop.score is not None and mobile.score is not None,
            desktop_source="pagespeed" if desktop.score is not None else "estimated",
            mobile_source="pagespeed" if mobile.score is not None else "estimated",
        )

        self.logger.info(
            "performance_estimated",
            url=url,
            desktop=scores.performance_score,
            mobile=scores.mobile_score,
            desktop_source=scores.desktop_source,
            mobile_source=scores.mobile_source,
        )
        return scores
