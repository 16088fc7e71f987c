"""Base models and enums."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )


class FrozenSchema(BaseModel):
    """Base schema for value objects that never change after construction."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class Severity(str, Enum):
    """Finding severity levels."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        """Points deducted from the security score per finding."""
        return SEVERITY_WEIGHTS[self]


SEVERITY_WEIGHTS = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 8,
    Severity.LOW: 3,
}


class FindingType(str, Enum):
    """Security finding categories."""

    SECURITY_HEADER = "security_header"
    SSL_TLS = "ssl_tls"
    DIRECTORY_LISTING = "directory_listing"
    INFORMATION_DISCLOSURE = "information_disclosure"
    INJECTION = "injection"
    XSS = "xss"
    MISCONFIGURATION = "misconfiguration"
    VERSION = "version"
    PLUGIN = "plugin"
    THEME = "theme"
    CONFIG = "config"
    FILE = "file"
    USER_ENUM = "user_enum"


class RiskLevel(str, Enum):
    """Overall risk classification of a site."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
