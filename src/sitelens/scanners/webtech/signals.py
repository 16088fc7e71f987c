"""Delivery signals derived from a fetched page."""

import re
from collections.abc import Mapping

from sitelens.models import FetchedPage, TechnicalSignals
from sitelens.models.webtech import CachingLevel, ImageOptimization

CDN_INDICATORS = (
    "cloudflare",
    "cloudfront",
    "fastly",
    "maxcdn",
    "keycdn",
    "jsdelivr",
    "unpkg",
    "cdnjs",
    "bootstrapcdn",
)

CACHE_HEADERS = ("cache-control", "expires", "etag", "last-modified")

IMG_TAG_PATTERN = re.compile(r"<img[^>]+>", re.IGNORECASE)


def detect_cdn(html: str, headers: Mapping[str, str]) -> bool:
    """Vendor name literals anywhere in the HTML or header values.

    A page that merely links a library from a public CDN counts as using one.
    """
    html_lower = html.lower()
    header_values = " ".join(headers.values()).lower()
    return any(cdn in html_lower or cdn in header_values for cdn in CDN_INDICATORS)


def analyze_caching(headers: Mapping[str, str]) -> CachingLevel:
    found = sum(1 for name in CACHE_HEADERS if headers.get(name))
    if found >= 3:
        return "enabled"
    if found >= 1:
        return "partial"
    return "disabled"


def analyze_image_optimization(html: str) -> ImageOptimization:
    """Share of ``<img>`` tags referencing WebP files."""
    images = IMG_TAG_PATTERN.findall(html)
    if not images:
        return "good"

    webp_ratio = sum(1 for img in images if ".webp" in img) / len(images)
    if webp_ratio > 0.7:
        return "good"
    if webp_ratio > 0.3:
        return "needs-improvement"
    return "poor"


def extract_signals(page: FetchedPage) -> TechnicalSignals:
    return TechnicalSignals(
        has_ssl=page.is_https,
        has_cdn=detect_cdn(page.html, page.headers),
        caching=analyze_caching(page.headers),
        image_optimization=analyze_image_optimization(page.html),
    )
