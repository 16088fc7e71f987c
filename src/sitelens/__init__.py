"""SiteLens - website inspection and vulnerability heuristics."""

from sitelens.version import __version__

__all__ = ["__version__"]
