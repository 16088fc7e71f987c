"""HTTP client wrapper."""

import asyncio
import socket
from typing import Any

import httpx
from pydantic_core import PydanticCustomError

from sitelens.core.config import Settings, get_settings
from sitelens.core.exceptions import ForbiddenTargetError
from sitelens.core.logging import get_logger
from sitelens.models.target import check_hostname_allowed, is_blocked_ip

logger = get_logger("http")


async def check_target_allowed(hostname: str) -> None:
    """Resolve hostname and reject it if any address is internal.

    A resolution failure is not a violation; the fetch itself fails later.
    """
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as e:
        logger.debug("dns_resolution_failed", hostname=hostname, error=str(e))
        return

    for info in infos:
        address = info[4][0]
        if is_blocked_ip(address):
            logger.warning("ssrf_target_blocked", hostname=hostname, address=address)
            raise ForbiddenTargetError(
                "Access to private IP ranges not allowed",
                {"hostname": hostname, "address": address},
            )


class HTTPClient:
    """Async HTTP client wrapper.

    A single ``httpx.AsyncClient`` is shared by every fetch, probe and API
    call of an analysis. Redirects are followed unless a call passes
    ``follow_redirects=False``. Every outgoing request, each redirect hop
    included, is checked against the internal-target rules first.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        self._client = httpx.AsyncClient(
            timeout=self.settings.fetch_timeout,
            follow_redirects=True,
            max_redirects=self.settings.max_redirects,
            headers={"User-Agent": self.settings.user_agent},
            event_hooks={"request": [self._guard_request]},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _guard_request(self, request: httpx.Request) -> None:
        """Refuse to send a request whose host is internal.

        Raises:
            ForbiddenTargetError: host is a private address or internal name
        """
        host = request.url.host
        try:
            check_hostname_allowed(host)
        except PydanticCustomError as e:
            logger.warning("ssrf_request_blocked", url=str(request.url))
            raise ForbiddenTargetError(e.message(), {"url": str(request.url)}) from None
        if self.settings.ssrf_resolve_dns:
            await check_target_allowed(host)

    @property
    def client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with.")
        return self._client

    async def get(self, url: str | httpx.URL, **kwargs: Any) -> httpx.Response:
        """Make GET request."""
        return await self.client.get(url, **kwargs)

    async def head(self, url: str, **kwargs: Any) -> httpx.Response:
        """Make HEAD request."""
        return await self.client.head(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Make POST request."""
        return await self.client.post(url, **kwargs)
