"""Rate limiting implementation."""

from collections import OrderedDict

from aiolimiter import AsyncLimiter

from sitelens.core.interfaces import IRateLimiter
from sitelens.core.logging import get_logger

logger = get_logger("ratelimit")


class ClientRateLimiter(IRateLimiter):
    """Per-client request quota using one leaky bucket per key.

    ``check`` never waits: a request either fits into the client's bucket and
    is consumed, or it is refused. At most ``max_clients`` buckets are held;
    drained buckets go first, then the least recently used.
    """

    def __init__(
        self, rate: int, time_period: float = 60.0, max_clients: int = 10_000
    ) -> None:
        """
        Initialize rate limiter.

        Args:
            rate: Maximum number of requests per period
            time_period: Period in seconds (default: 60.0)
            max_clients: Upper bound on tracked client keys
        """
        self._rate = rate
        self._time_period = time_period
        self._max_clients = max_clients
        self._limiters: OrderedDict[str, AsyncLimiter] = OrderedDict()

    def __len__(self) -> int:
        return len(self._limiters)

    def _limiter(self, key: str) -> AsyncLimiter:
        limiter = self._limiters.get(key)
        if limiter is not None:
            self._limiters.move_to_end(key)
            return limiter

        if len(self._limiters) >= self._max_clients:
            self._evict()
        limiter = AsyncLimiter(self._rate, self._time_period)
        self._limiters[key] = limiter
        return limiter

    def _evict(self) -> None:
        # a drained bucket behaves exactly like a fresh one
        drained = [k for k, lim in self._limiters.items() if lim.has_capacity(self._rate)]
        for key in drained:
            del self._limiters[key]
        while len(self._limiters) >= self._max_clients:
            key, _ = self._limiters.popitem(last=False)
            logger.debug("rate_limiter_evicted", client_id=key)

    async def check(self, key: str) -> bool:
        """Consume one request for key; return False when over quota."""
        limiter = self._limiter(key)
        if not limiter.has_capacity():
            return False
        await limiter.acquire()
        return True

    def remaining(self, key: str) -> int:
        """Approximate number of requests still allowed for key."""
        limiter = self._limiters.get(key)
        if limiter is None:
            return self._rate
        remaining = 0
        while remaining < self._rate and limiter.has_capacity(remaining + 1):
            remaining += 1
        return remaining
