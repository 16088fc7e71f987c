"""Infrastructure layer."""

from sitelens.infrastructure.http import HTTPClient, check_target_allowed
from sitelens.infrastructure.cache import MemoryCache
from sitelens.infrastructure.ratelimit import ClientRateLimiter
from sitelens.infrastructure.fetcher import Fetcher, validate_url

__all__ = [
    "HTTPClient",
    "MemoryCache",
    "ClientRateLimiter",
    "Fetcher",
    "check_target_allowed",
    "validate_url",
]
