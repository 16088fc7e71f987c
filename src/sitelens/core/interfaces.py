"""Abstract interfaces for page scanners and the stores the coordinator uses."""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from sitelens.models.page import FetchedPage

# Type variable for scanner results
TResult = TypeVar("TResult")


class IScanner(ABC, Generic[TResult]):
    """A check that derives a result from an already fetched page."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Scanner module name."""
        ...

    @abstractmethod
    async def scan(self, page: FetchedPage) -> TResult:
        """Analyze the page; active probes may issue further requests."""
        ...


class ICache(ABC):
    """Store for finished reports, keyed by normalized URL."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Stored value, or None when missing or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int = 3600) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...


class IRateLimiter(ABC):
    """Check-and-consume rate limiting keyed by client identity."""

    @abstractmethod
    async def check(self, key: str) -> bool:
        """Consume one request for key; return False when over quota."""
        ...

    @abstractmethod
    def remaining(self, key: str) -> int:
        """Approximate number of requests still allowed for key."""
        ...
