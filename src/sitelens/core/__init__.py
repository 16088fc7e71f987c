"""Core module - configuration, logging, and interfaces."""

from sitelens.core.config import Settings, get_settings
from sitelens.core.exceptions import (
    SiteLensError,
    ValidationError,
    InvalidUrlError,
    ForbiddenTargetError,
    FetchError,
    FetchFailedError,
    InsufficientContentError,
    RateLimitError,
)

__all__ = [
    "Settings",
    "get_settings",
    "SiteLensError",
    "ValidationError",
    "InvalidUrlError",
    "ForbiddenTargetError",
    "FetchError",
    "FetchFailedError",
    "InsufficientContentError",
    "RateLimitError",
]
