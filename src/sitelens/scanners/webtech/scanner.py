"""Technology detector combining third-party lookup and fingerprints."""

from sitelens.core.config import Settings
from sitelens.infrastructure.http import HTTPClient
from sitelens.models import FetchedPage, Technology
from sitelens.scanners.base import BaseScanner
from sitelens.scanners.webtech.builtwith import BuiltWithClient
from sitelens.scanners.webtech.fingerprints import detect_technologies

MAX_TECHNOLOGIES = 20


def merge_technologies(
    primary: list[Technology],
    secondary: list[Technology],
    limit: int = MAX_TECHNOLOGIES,
) -> list[Technology]:
    """Merge two detection sources.

    The first entry seen per lowercased name wins, so ``primary`` takes
    precedence. The result is sorted by confidence (stable) and truncated.
    """
    seen: set[str] = set()
    merged = []
    for tech in [*primary, *secondary]:
        key = tech.name.lower()
        if key in seen:
            continue
        seen.add(key)
        merged.append(tech)

    merged.sort(key=lambda t: t.confidence, reverse=True)
    return merged[:limit]


class TechnologyDetector(BaseScanner[list[Technology]]):
    """Web technology detection."""

    def __init__(
        self,
        http: HTTPClient,
        settings: Settings | None = None,
        builtwith: BuiltWithClient | None = None,
    ) -> None:
        super().__init__(http, settings)
        self.builtwith = builtwith or BuiltWithClient(http, self.settings)

    @property
    def name(self) -> str:
        return "webtech"

    async def scan(self, page: FetchedPage) -> list[Technology]:
        return await self.detect(page)

    async def detect(self, page: FetchedPage) -> list[Technology]:
        """Detect technologies used by the page."""
        looked_up = await self.builtwith.lookup(page.domain)
        fingerprinted = detect_technologies(page.html, page.headers)

        technologies = merge_technologies(
            looked_up, fingerprinted, limit=self.settings.max_technologies
        )

        self.logger.info(
            "technology_detection_completed",
            target=page.url,
            builtwith=len(looked_up),
            fingerprinted=len(fingerprinted),
            total=len(technologies),
        )
        return technologies
