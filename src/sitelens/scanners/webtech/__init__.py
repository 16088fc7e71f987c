"""Technology detector and page signals."""

from sitelens.scanners.webtech.builtwith import BuiltWithClient
from sitelens.scanners.webtech.fingerprints import detect_technologies
from sitelens.scanners.webtech.scanner import TechnologyDetector, merge_technologies
from sitelens.scanners.webtech.signals import (
    analyze_caching,
    analyze_image_optimization,
    detect_cdn,
    extract_signals,
)

__all__ = [
    "BuiltWithClient",
    "TechnologyDetector",
    "analyze_caching",
    "analyze_image_optimization",
    "detect_cdn",
    "detect_technologies",
    "extract_signals",
    "merge_technologies",
]
