"""Web security scanner."""

from sitelens.scanners.security.scanner import (
    COMMON_PATHS,
    SECURITY_HEADERS,
    WebSecurityScanner,
    calculate_security_score,
)

__all__ = [
    "COMMON_PATHS",
    "SECURITY_HEADERS",
    "WebSecurityScanner",
    "calculate_security_score",
]
