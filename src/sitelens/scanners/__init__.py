"""Page scanners for SiteLens."""

from sitelens.scanners.base import BaseScanner

__all__ = ["BaseScanner"]
