"""Analysis orchestration."""

from sitelens.orchestration.coordinator import AnalysisCoordinator

__all__ = ["AnalysisCoordinator"]
