"""Base scanner class."""

import asyncio
from abc import abstractmethod
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

import httpx

from sitelens.core.config import Settings, get_settings
from sitelens.core.exceptions import ForbiddenTargetError
from sitelens.core.interfaces import IScanner
from sitelens.core.logging import get_logger
from sitelens.infrastructure.http import HTTPClient
from sitelens.models import FetchedPage, ProbeResult

TResult = TypeVar("TResult")


class BaseScanner(IScanner[TResult], Generic[TResult]):
    """Base class for page scanners that share one HTTP client."""

    def __init__(self, http: HTTPClient, settings: Settings | None = None) -> None:
        self.http = http
        self.settings = settings or get_settings()
        self.logger = get_logger(f"{self.name}_scanner")
        self._probe_slots = asyncio.Semaphore(self.settings.max_concurrent_probes)

    @property
    @abstractmethod
    def name(self) -> str:
        """Scanner module name."""
        ...

    @abstractmethod
    async def scan(self, page: FetchedPage) -> TResult:
        """Execute the scan and return results."""
        ...

    async def run_probe(
        self,
        name: str,
        probe: Callable[[], Awaitable[ProbeResult]],
    ) -> ProbeResult:
        """Run one active probe, converting any failure into a ProbeResult.

        Probe errors never propagate; the caller sees ``detected=False`` with
        the error kept for logging.
        """
        async with self._probe_slots:
            try:
                return await probe()
            except httpx.TimeoutException as e:
                error = f"timeout: {e!r}"
            except httpx.HTTPError as e:
                error = str(e) or repr(e)
            except ForbiddenTargetError as e:
                error = f"forbidden: {e.message}"

        self.logger.debug("probe_failed", probe=name, error=error)
        return ProbeResult(name=name, detected=False, error=error)
