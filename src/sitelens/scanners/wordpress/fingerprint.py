"""Passive WordPress fingerprinting from page HTML and headers.

These are substring heuristics. Plugin enumeration only sees assets that are
referenced by path in the served HTML, so bundled or minified assets hide
plugins and the count is a lower bound of what is installed.
"""

import re
from collections.abc import Mapping

WORDPRESS_INDICATORS = (
    "/wp-content/",
    "/wp-includes/",
    "wp-json",
    "wordpress",
    "wp_enqueue_script",
    "wp-admin",
    "/wp-login.php",
)

VERSION_PATTERNS = (
    re.compile(r"wp-includes/js/wp-emoji-release\.min\.js\?ver=([0-9.]+)"),
    re.compile(r'<meta name="generator" content="WordPress ([0-9.]+)"'),
)

THEME_PATTERN = re.compile(r"/wp-content/themes/([^/?'\"]+)")
PLUGIN_PATTERN = re.compile(r"/wp-content/plugins/([^/?'\"]+)")


def detect_wordpress(html: str, headers: Mapping[str, str] | None = None) -> bool:
    """Return True when the page carries any WordPress indicator."""
    html_lower = html.lower()
    if any(indicator in html_lower for indicator in WORDPRESS_INDICATORS):
        return True
    return any("wordpress" in value.lower() for value in (headers or {}).values())


def extract_version(html: str) -> str | None:
    for pattern in VERSION_PATTERNS:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


def extract_theme(html: str) -> str | None:
    """First theme slug referenced in the page, capitalized."""
    match = THEME_PATTERN.search(html)
    if not match:
        return None
    slug = match.group(1)
    return slug[:1].upper() + slug[1:]


def extract_plugins(html: str) -> list[str]:
    """Distinct plugin slugs in first-seen order."""
    return list(dict.fromkeys(PLUGIN_PATTERN.findall(html)))


def parse_version(version: str) -> tuple[int, int | None] | None:
    """Major and minor components; None when the major part is unparsable."""
    parts = version.split(".")
    try:
        major = int(parts[0])
    except ValueError:
        return None
    try:
        minor = int(parts[1]) if len(parts) > 1 else None
    except ValueError:
        minor = None
    return major, minor
