"""In-process technology fingerprints."""

from collections.abc import Mapping

from sitelens.models import Technology
from sitelens.scanners.webtech.signals import detect_cdn
from sitelens.scanners.wordpress.fingerprint import detect_wordpress, extract_version

# Lowercased HTML substrings per technology; any match detects it
TECH_FINGERPRINTS = {
    "React": {
        "body": ("react", "_react"),
        "category": "JavaScript frameworks",
        "confidence": 75,
    },
    "Vue.js": {
        "body": ("vue", "vuejs"),
        "category": "JavaScript frameworks",
        "confidence": 75,
    },
    "Angular": {
        "body": ("angular", "ng-"),
        "category": "JavaScript frameworks",
        "confidence": 75,
    },
    "jQuery": {
        "body": ("jquery", "jquery.min.js"),
        "category": "JavaScript libraries",
        "confidence": 85,
    },
    "Bootstrap": {
        "body": ("bootstrap", "bootstrap.min.css"),
        "category": "CSS frameworks",
        "confidence": 80,
    },
    "Tailwind CSS": {
        "body": ("tailwind", "tailwindcss"),
        "category": "CSS frameworks",
        "confidence": 80,
    },
    "Google Analytics": {
        "body": ("google-analytics", "gtag"),
        "category": "Analytics",
        "confidence": 90,
    },
    "Google Tag Manager": {
        "body": ("gtm", "googletagmanager"),
        "category": "Tag managers",
        "confidence": 85,
    },
}


def detect_technologies(html: str, headers: Mapping[str, str]) -> list[Technology]:
    """Substring fingerprinting over the page.

    Short markers such as ``vue`` or ``ng-`` also match unrelated words, so
    these detections carry lower confidence than third-party lookups.
    """
    technologies = []
    html_lower = html.lower()

    if detect_wordpress(html, headers):
        technologies.append(
            Technology(
                name="WordPress",
                confidence=90,
                version=extract_version(html),
                category="CMS",
            )
        )

    for name, fingerprint in TECH_FINGERPRINTS.items():
        if any(marker in html_lower for marker in fingerprint["body"]):
            technologies.append(
                Technology(
                    name=name,
                    confidence=fingerprint["confidence"],
                    category=fingerprint["category"],
                )
            )

    if detect_cdn(html, headers):
        technologies.append(
            Technology(name="Content Delivery Network", confidence=80, category="CDN")
        )

    return technologies
