"""WordPress analyzer."""

from sitelens.scanners.wordpress.fingerprint import (
    detect_wordpress,
    extract_plugins,
    extract_theme,
    extract_version,
)
from sitelens.scanners.wordpress.scanner import WordPressAnalyzer

__all__ = [
    "WordPressAnalyzer",
    "detect_wordpress",
    "extract_plugins",
    "extract_theme",
    "extract_version",
]
