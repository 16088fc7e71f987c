"""Main CLI application using Typer."""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sitelens.version import __version__
from sitelens.core.config import get_settings
from sitelens.core.exceptions import SiteLensError
from sitelens.core.logging import setup_logging

app = typer.Typer(
    name="sitelens",
    help="SiteLens - website technology, performance and security inspection",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"SiteLens version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """SiteLens - inspect a website for technologies, performance and security."""
    setup_logging()


@app.command()
def analyze(
    url: Annotated[str, typer.Argument(help="Website URL or bare domain")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the JSON report to this file"),
    ] = None,
    format_type: Annotated[
        str,
        typer.Option("--format", help="Output format: table, json"),
    ] = "table",
) -> None:
    """
    Analyze a website.

    Examples:
        sitelens analyze example.com
        sitelens analyze https://example.com/blog --format json
        sitelens analyze example.com --output report.json
    """
    from sitelens.cli.formatters import export_json, format_analysis_result, format_json
    from sitelens.orchestration import AnalysisCoordinator

    if format_type not in ("table", "json"):
        console.print(f"[red]Unknown format: {format_type}[/red]")
        raise typer.Exit(2)

    if format_type == "table":
        console.print(
            Panel(
                f"[bold blue]SiteLens Analysis[/bold blue]\n"
                f"URL: [green]{url}[/green]",
                title="Starting Analysis",
            )
        )

    coordinator = AnalysisCoordinator()

    with console.status("[bold green]Analyzing...[/bold green]"):
        try:
            result = asyncio.run(coordinator.analyze(url))
        except SiteLensError as e:
            console.print(f"[red]Analysis failed ({e.code}): {e.message}[/red]")
            raise typer.Exit(1) from None

    if output:
        saved = export_json(result, output)
        console.print(f"[green]Report saved to {saved}[/green]")

    if format_type == "json":
        format_json(console, result)
    else:
        format_analysis_result(console, result)


@app.command()
def config(
    show: Annotated[
        bool,
        typer.Option("--show", "-s", help="Show current configuration"),
    ] = False,
    validate: Annotated[
        bool,
        typer.Option("--validate", help="Validate configuration"),
    ] = False,
) -> None:
    """Manage configuration settings."""
    settings = get_settings()

    if show or not validate:
        table = Table(title="Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("API Host", settings.api_host)
        table.add_row("API Port", str(settings.api_port))
        table.add_row("Log Level", settings.log_level)
        table.add_row("Log Format", settings.log_format)
        table.add_row(
            "BuiltWith API Key",
            "[green]Set[/green]" if settings.get_builtwith_key() else "[red]Not set[/red]",
        )
        table.add_row(
            "PageSpeed API Key",
            "[green]Set[/green]" if settings.get_pagespeed_key() else "[red]Not set[/red]",
        )
        table.add_row("Fetch Timeout", f"{settings.fetch_timeout}s")
        table.add_row("Proxy URL", settings.proxy_url)
        table.add_row("Probe Timeout", f"{settings.probe_timeout}s")
        table.add_row("PageSpeed Timeout", f"{settings.pagespeed_timeout}s")
        table.add_row("Cache TTL", f"{settings.cache_ttl_seconds}s")
        table.add_row("Rate Limit", f"{settings.rate_limit_per_minute}/min")
        table.add_row("SSRF DNS Check", "Yes" if settings.ssrf_resolve_dns else "No")

        console.print(table)

    if validate:
        errors = []
        warnings = []

        if not settings.get_pagespeed_key():
            warnings.append("PAGESPEED_API_KEY not set; performance scores will be estimated")
        if not settings.get_builtwith_key():
            warnings.append("BUILTWITH_API_KEY not set; technology lookup uses fingerprints only")
        if not settings.proxy_url.startswith(("http://", "https://")):
            errors.append("PROXY_URL must be an http(s) URL")
        if settings.pagespeed_backoff_base > settings.pagespeed_backoff_cap:
            errors.append("PAGESPEED_BACKOFF_BASE must not exceed PAGESPEED_BACKOFF_CAP")

        for warning in warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning}")

        if errors:
            console.print("[red]Configuration errors:[/red]")
            for error in errors:
                console.print(f"  - {error}")
            raise typer.Exit(1)
        else:
            console.print("[green]Configuration is valid[/green]")


@app.command()
def serve(
    host: Annotated[
        Optional[str],
        typer.Option("--host", "-h", help="Host to bind to"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Port to bind to"),
    ] = None,
    reload: Annotated[
        bool,
        typer.Option("--reload", "-r", help="Enable auto-reload for development"),
    ] = False,
) -> None:
    """Start the REST API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print(
        Panel(
            f"[bold blue]Starting API Server[/bold blue]\n"
            f"Host: [green]{host}[/green]\n"
            f"Port: [green]{port}[/green]\n"
            f"Docs: [cyan]http://{host}:{port}/docs[/cyan]",
            title="API Server",
        )
    )

    uvicorn.run(
        "sitelens.api.app:app",
        host=host,
        port=port,
        reload=reload,
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
