"""CLI output formatters."""

from sitelens.cli.formatters.table import format_analysis_result
from sitelens.cli.formatters.json_fmt import export_json, format_json

__all__ = ["format_analysis_result", "format_json", "export_json"]
