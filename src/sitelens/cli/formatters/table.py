"""Table formatter for CLI output."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sitelens.models import AnalysisResult, SecurityFinding, Severity

SEVERITY_COLORS = {
    "critical": "red",
    "high": "orange1",
    "medium": "yellow",
    "low": "green",
}

RISK_COLORS = SEVERITY_COLORS


def _score_color(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def format_analysis_result(console: Console, result: AnalysisResult) -> None:
    """Format and display an analysis report as tables."""
    risk = result.risk_level.value
    risk_color = RISK_COLORS.get(risk, "white")
    cached = " [dim](cached)[/dim]" if result.cached else ""

    console.print()
    console.print(
        Panel(
            f"[bold green]Analysis Complete[/bold green]{cached}\n"
            f"URL: [cyan]{result.url}[/cyan]\n"
            f"Risk Level: [{risk_color}]{risk.upper()}[/{risk_color}]\n"
            f"Data: {result.data_source} (confidence: {result.confidence})",
            title="Results",
        )
    )

    _format_performance(console, result)

    if result.is_wordpress:
        _format_wordpress(console, result)

    if result.technologies:
        _format_technologies(console, result)

    _format_security(console, result)
    _format_recommendations(console, result)

    if result.errors:
        console.print("\n[yellow]Partial analysis:[/yellow]")
        for error in result.errors:
            console.print(f"  - {error}")


def _format_performance(console: Console, result: AnalysisResult) -> None:
    table = Table(title="Performance & Delivery", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    desktop = result.performance_score
    mobile = result.mobile_score
    table.add_row("Desktop Score", f"[{_score_color(desktop)}]{desktop}[/{_score_color(desktop)}]")
    table.add_row("Mobile Score", f"[{_score_color(mobile)}]{mobile}[/{_score_color(mobile)}]")
    table.add_row("SSL", "[green]Yes[/green]" if result.has_ssl else "[red]No[/red]")
    table.add_row("CDN", "[green]Yes[/green]" if result.has_cdn else "[yellow]No[/yellow]")
    table.add_row("Caching", result.caching)
    table.add_row("Image Optimization", result.image_optimization)

    console.print(table)


def _format_wordpress(console: Console, result: AnalysisResult) -> None:
    table = Table(title="WordPress", show_header=True)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Version", result.wp_version or "Unknown")
    table.add_row("Theme", result.theme or "Unknown")
    table.add_row("Plugins", str(result.plugins or 0))
    table.add_row("Security Issues", str(len(result.wp_security_issues)))

    console.print(table)


def _format_technologies(console: Console, result: AnalysisResult) -> None:
    table = Table(title="Web Technologies", show_header=True)
    table.add_column("Technology", style="cyan")
    table.add_column("Category", style="green")
    table.add_column("Version")
    table.add_column("Confidence")

    for tech in result.technologies:
        table.add_row(
            tech.name,
            tech.category,
            tech.version or "",
            f"{tech.confidence}%",
        )

    console.print(table)


def _format_security(console: Console, result: AnalysisResult) -> None:
    score = result.overall_security_score
    console.print(
        f"\n[bold]Security Score:[/bold] "
        f"[{_score_color(score)}]{score}/100[/{_score_color(score)}]"
    )

    if not result.security_findings:
        console.print("[green]No security issues found[/green]")
        return

    summary = []
    for severity in Severity:
        count = len(result.findings_by_severity(severity))
        if count:
            color = SEVERITY_COLORS[severity.value]
            summary.append(f"[{color}]{severity.value.capitalize()}: {count}[/{color}]")
    console.print(
        f"[bold]Security Findings:[/bold] {result.total_findings} ({', '.join(summary)})"
    )

    table = Table(title="Security Findings", show_header=True)
    table.add_column("Severity")
    table.add_column("Type", style="cyan")
    table.add_column("Title")

    for finding in _sorted_findings(result.security_findings)[:20]:
        color = SEVERITY_COLORS.get(finding.severity.value, "white")
        table.add_row(
            f"[{color}]{finding.severity.value.upper()}[/{color}]",
            finding.type.value,
            finding.title,
        )

    if len(result.security_findings) > 20:
        table.add_row("...", "", f"({len(result.security_findings) - 20} more)")

    console.print(table)

    if result.missing_security_headers:
        console.print(
            f"\n[yellow]Missing Security Headers:[/yellow] "
            f"{', '.join(result.missing_security_headers)}"
        )


def _sorted_findings(findings: list[SecurityFinding]) -> list[SecurityFinding]:
    order = {severity: i for i, severity in enumerate(Severity)}
    return sorted(findings, key=lambda f: order[f.severity])


def _format_recommendations(console: Console, result: AnalysisResult) -> None:
    if not result.recommendations:
        return

    console.print(
        Panel(
            "\n".join(f"{i}. {rec}" for i, rec in enumerate(result.recommendations, 1)),
            title="Recommendations",
            border_style="blue",
        )
    )
