"""BuiltWith technology lookup client."""

import re
from typing import Any

import httpx

from sitelens.core.config import Settings, get_settings
from sitelens.core.logging import get_logger
from sitelens.infrastructure.http import HTTPClient
from sitelens.models import Technology

BUILTWITH_CONFIDENCE = 85

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def split_category(category: str) -> str:
    """``JavaScriptFrameworks`` becomes ``Java Script Frameworks``."""
    return _CAMEL_BOUNDARY.sub(r" \1", category).strip()


class BuiltWithClient:
    """Best-effort technology lookup by bare domain.

    Any failure, including a missing API key, yields an empty list.
    """

    def __init__(self, http: HTTPClient, settings: Settings | None = None) -> None:
        self.http = http
        self.settings = settings or get_settings()
        self.logger = get_logger("builtwith")

    async def lookup(self, domain: str) -> list[Technology]:
        api_key = self.settings.get_builtwith_key()
        if not api_key:
            self.logger.debug("builtwith_key_missing")
            return []

        try:
            response = await self.http.get(
                self.settings.builtwith_url,
                params={"KEY": api_key, "LOOKUP": domain},
                headers={"Accept": "application/json"},
                timeout=self.settings.builtwith_timeout,
            )
            if response.status_code != 200:
                self.logger.warning(
                    "builtwith_lookup_failed",
                    domain=domain,
                    status=response.status_code,
                )
                return []
            technologies = self.parse(response.json())
        except (httpx.HTTPError, ValueError) as e:
            self.logger.warning("builtwith_lookup_failed", domain=domain, error=str(e))
            return []

        self.logger.info("builtwith_lookup_completed", domain=domain, count=len(technologies))
        return technologies

    @staticmethod
    def parse(data: Any) -> list[Technology]:
        """Extract technologies from ``Results[0].Result`` category arrays."""
        try:
            result = data["Results"][0]["Result"]
        except (KeyError, IndexError, TypeError):
            return []
        if not isinstance(result, dict):
            return []

        technologies = []
        for category, entries in result.items():
            if not isinstance(entries, list):
                continue
            for entry in entries:
                if not isinstance(entry, dict):
                    continue
                version = entry.get("Version")
                technologies.append(
                    Technology(
                        name=entry.get("Name") or entry.get("Tag") or "Unknown",
                        confidence=BUILTWITH_CONFIDENCE,
                        version=str(version) if version else None,
                        category=split_category(category),
                        source="builtwith",
                    )
                )
        return technologies
