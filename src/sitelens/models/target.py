"""Analysis target model with URL normalization and SSRF protection."""

import re
from ipaddress import IPv4Address, IPv4Network, IPv6Address, ip_address
from urllib.parse import urlsplit

from pydantic import Field, field_validator
from pydantic_core import PydanticCustomError

from sitelens.models.base import BaseSchema

MAX_URL_LENGTH = 2048

ALLOWED_SCHEMES = ("http", "https")

# SSRF protection: blocked IP ranges
BLOCKED_IP_RANGES = [
    IPv4Network("0.0.0.0/8"),       # Current network
    IPv4Network("10.0.0.0/8"),      # Private (Class A)
    IPv4Network("127.0.0.0/8"),     # Loopback
    IPv4Network("169.254.0.0/16"),  # Link-local (includes cloud metadata)
    IPv4Network("172.16.0.0/12"),   # Private (Class B)
    IPv4Network("192.168.0.0/16"),  # Private (Class C)
    IPv4Network("224.0.0.0/4"),     # Multicast
    IPv4Network("240.0.0.0/4"),     # Reserved
]

# Cloud metadata endpoints (explicit block)
CLOUD_METADATA_IPS = [
    "169.254.169.254",  # AWS, GCP, Azure metadata
    "169.254.170.2",    # AWS ECS metadata
    "100.100.100.200",  # Alibaba Cloud metadata
]

# Forbidden hostnames (SSRF protection)
FORBIDDEN_DOMAINS = [
    "localhost",
    "localhost.localdomain",
]

# Forbidden pseudo-TLDs
FORBIDDEN_DOMAIN_SUFFIXES = [
    ".local",
    ".internal",
    ".localhost",
]

_LABEL_RE = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")
_WHITESPACE_RE = re.compile(r"[\s\x00-\x1f\x7f]")


def normalize_url(raw: str) -> str:
    """Prefix ``https://`` when no http(s) scheme is given."""
    url = raw.strip()
    if not re.match(r"^https?://", url, re.IGNORECASE):
        url = f"https://{url}"
    return url


def invalid_url(message: str) -> PydanticCustomError:
    return PydanticCustomError("invalid_url", message)


def forbidden_target(message: str) -> PydanticCustomError:
    return PydanticCustomError("forbidden_target", message)


def is_blocked_ip(value: str) -> bool:
    """Return True for private, loopback, link-local and reserved addresses."""
    try:
        ip = ip_address(value.strip("[]"))
    except ValueError:
        return False

    if (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    ):
        return True

    if isinstance(ip, IPv6Address) and ip.ipv4_mapped is not None:
        return is_blocked_ip(str(ip.ipv4_mapped))

    if isinstance(ip, IPv4Address):
        if str(ip) in CLOUD_METADATA_IPS:
            return True
        for network in BLOCKED_IP_RANGES:
            if ip in network:
                return True

    return False


def check_hostname_allowed(hostname: str) -> None:
    """Raise a ``forbidden_target`` error for internal hostnames and addresses."""
    host = hostname.lower().rstrip(".")

    if host in FORBIDDEN_DOMAINS:
        raise forbidden_target("Access to internal/local resources not allowed")

    for suffix in FORBIDDEN_DOMAIN_SUFFIXES:
        if host.endswith(suffix):
            raise forbidden_target("Access to internal domains not allowed")

    if is_blocked_ip(host):
        raise forbidden_target("Access to private IP ranges not allowed")


def _is_ip_literal(host: str) -> bool:
    try:
        ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


class AnalysisTarget(BaseSchema):
    """A validated, normalized URL that is safe to fetch."""

    url: str = Field(description="Scheme-qualified target URL")

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, v: object) -> str:
        if not isinstance(v, str) or not v.strip():
            raise invalid_url("URL is required")

        if len(v) > MAX_URL_LENGTH:
            raise invalid_url("URL too long")

        if re.match(r"^[a-z][a-z0-9+.-]*://", v.strip(), re.IGNORECASE) and not re.match(
            r"^https?://", v.strip(), re.IGNORECASE
        ):
            raise invalid_url("Invalid protocol")

        url = normalize_url(v)
        if len(url) > MAX_URL_LENGTH:
            raise invalid_url("URL too long")

        if _WHITESPACE_RE.search(url):
            raise invalid_url("Invalid URL format")

        try:
            parts = urlsplit(url)
            # Accessing port validates it
            parts.port
        except ValueError:
            raise invalid_url("Invalid URL format") from None

        if parts.scheme.lower() not in ALLOWED_SCHEMES:
            raise invalid_url("Invalid protocol")

        host = parts.hostname
        if not host:
            raise invalid_url("Invalid URL format")

        if not _is_ip_literal(host):
            labels = host.rstrip(".").split(".")
            if not all(_LABEL_RE.match(label) for label in labels):
                raise invalid_url("Invalid URL format")

        check_hostname_allowed(host)
        return url

    @property
    def hostname(self) -> str:
        return (urlsplit(self.url).hostname or "").lower()
