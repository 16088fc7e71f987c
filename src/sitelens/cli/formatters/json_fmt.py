"""JSON output for analysis reports."""

from pathlib import Path

from rich.console import Console

from sitelens.models import AnalysisResult


def format_json(console: Console, result: AnalysisResult) -> None:
    """Print the report as highlighted JSON."""
    console.print_json(result.to_json())


def export_json(result: AnalysisResult, path: str | Path) -> Path:
    """Write the report to path, creating parent directories as needed."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(result.to_json() + "\n", encoding="utf-8")
    return target
