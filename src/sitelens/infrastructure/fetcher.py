"""Page fetcher with URL validation, SSRF guard and proxy fallback."""

import httpx
from pydantic import ValidationError as PydanticValidationError

from sitelens.core.config import Settings, get_settings
from sitelens.core.exceptions import (
    FetchFailedError,
    ForbiddenTargetError,
    InsufficientContentError,
    InvalidUrlError,
)
from sitelens.core.logging import get_logger
from sitelens.infrastructure.http import HTTPClient
from sitelens.models import AnalysisTarget, FetchedPage


def validate_url(raw: str, settings: Settings | None = None) -> AnalysisTarget:
    """Normalize and validate a user supplied URL.

    Raises:
        InvalidUrlError: malformed or oversized URL
        ForbiddenTargetError: URL points at an internal or private target
    """
    settings = settings or get_settings()

    if isinstance(raw, str) and len(raw.strip()) > settings.max_url_length:
        raise InvalidUrlError("URL too long", {"max_length": settings.max_url_length})

    try:
        return AnalysisTarget(url=raw)
    except PydanticValidationError as e:
        error = e.errors()[0]
        if error["type"] == "forbidden_target":
            raise ForbiddenTargetError(error["msg"], {"url": raw}) from e
        raise InvalidUrlError(error["msg"], {"url": raw}) from e


class Fetcher:
    """Retrieves the HTML and headers of a target page."""

    def __init__(self, http: HTTPClient, settings: Settings | None = None) -> None:
        self.http = http
        self.settings = settings or get_settings()
        self.logger = get_logger("fetcher")

    async def fetch(self, url: str) -> FetchedPage:
        """Fetch a validated URL, falling back to the content proxy once.

        A redirect towards an internal host raises ``ForbiddenTargetError``
        from the client's request guard and is not retried via the proxy.
        """
        try:
            page = await self._fetch_direct(url)
        except (httpx.HTTPError, ValueError) as direct_error:
            self.logger.info(
                "direct_fetch_failed", url=url, error=str(direct_error) or repr(direct_error)
            )
            try:
                page = await self._fetch_via_proxy(url)
            except (httpx.HTTPError, ValueError, KeyError, TypeError) as proxy_error:
                self.logger.warning(
                    "proxy_fetch_failed",
                    url=url,
                    error=str(proxy_error) or repr(proxy_error),
                )
                raise FetchFailedError(
                    "Unable to fetch website",
                    {"url": url, "direct_error": str(direct_error)},
                ) from proxy_error

        if len(page.html.strip()) < self.settings.min_content_length:
            raise InsufficientContentError(
                "Website returned insufficient content",
                {"url": url, "length": len(page.html.strip())},
            )

        self.logger.info(
            "page_fetched",
            url=url,
            via_proxy=page.via_proxy,
            size=len(page.html),
        )
        return page

    async def _fetch_direct(self, url: str) -> FetchedPage:
        response = await self.http.get(
            url,
            timeout=self.settings.fetch_timeout,
            follow_redirects=True,
            headers={
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.5",
            },
        )
        response.raise_for_status()

        return FetchedPage(
            url=url,
            html=response.text,
            headers=dict(response.headers),
            status_code=response.status_code,
        )

    async def _fetch_via_proxy(self, url: str) -> FetchedPage:
        response = await self.http.get(
            self.settings.proxy_url,
            params={"url": url},
            timeout=self.settings.proxy_timeout,
        )
        response.raise_for_status()

        data = response.json()
        contents = data["contents"]
        if not isinstance(contents, str):
            raise ValueError("Proxy response has no page contents")

        status = data.get("status") or {}
        status_code = status.get("http_code") if isinstance(status, dict) else None

        return FetchedPage(
            url=url,
            html=contents,
            headers={},
            status_code=status_code if isinstance(status_code, int) else None,
            via_proxy=True,
        )
