"""
TraceMap — Command Line Interface

All commands are defined here using Typer + Rich.
Entry point: tracemap (defined in pyproject.toml [project.scripts])

Commands:
  analyze — Score an email address with the four-signal model
  module  — Run one of the Text/Image/Location/Code analyses
  serve   — Start the HTTP API
  config  — Show the active explanation provider

Usage:
  tracemap analyze admin@example.com
  tracemap module Code my_api_repo --no-ai
  tracemap serve --port 5000
"""

import asyncio
import json
import sys

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tracemap import __version__

app = typer.Typer(
    name="tracemap",
    help="[bold cyan]TraceMap[/bold cyan] — Simulated OSINT exposure scoring",
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

LEVEL_COLORS = {
    "LOW": "green",
    "MEDIUM": "yellow",
    "HIGH": "red",
    "CRITICAL": "bold red",
}


def _run_async(coro):
    """Run an async coroutine from a sync Typer command."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]Analysis interrupted by user.[/yellow]")
        sys.exit(0)


def _build_service(no_ai: bool):
    from tracemap.ai.explainer import Explainer, LLMExplanationClient
    from tracemap.core.config import settings
    from tracemap.engine.analyzer import AnalysisService

    explainer = Explainer(
        LLMExplanationClient(settings),
        timeout=settings.explanation_timeout_seconds,
        enabled=settings.enable_ai_explanations and not no_ai,
    )
    return AnalysisService(explainer, audit=settings.audit_log_enabled)


def _display_result(title: str, target: str | None, result) -> None:
    """Display a Rich summary of an analysis response."""
    level = result.risk_level.value
    color = LEVEL_COLORS.get(level, "white")

    console.print(
        Panel(
            f"[bold]Target:[/bold] {escape(target or '-')}\n"
            f"[bold]Risk Score:[/bold] {result.risk_score}/10.0\n"
            f"[bold]Risk Level:[/bold] [{color}]{level}[/{color}]",
            title=f"[bold cyan]{title}[/bold cyan]",
            border_style=color,
        )
    )

    table = Table(title="Exposure Summary", box=box.ROUNDED)
    table.add_column("Factor", style="cyan")
    table.add_column("Assessment", style="white")
    for factor, label in result.exposure_summary.items():
        table.add_row(factor.replace("_", " ").title(), label)
    console.print(table)

    console.print("\n[bold]Explanation[/bold]")
    for line in result.ai_explanation:
        console.print(f"  • {escape(line)}")

    console.print("\n[bold]Recommendations[/bold]")
    for rec in result.recommendations:
        console.print(f"  • {escape(rec)}")

    console.print(f"\n[dim]{result.disclaimer}[/dim]")


# ── Commands ────────────────────────────────────────────────────


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
    verbose: bool = typer.Option(False, "--verbose", help="Show info-level logs"),
) -> None:
    """TraceMap — Simulated OSINT exposure scoring"""
    if version:
        console.print(f"[bold cyan]TraceMap[/bold cyan] v{__version__}")
        raise typer.Exit()

    from tracemap.core.config import settings
    from tracemap.core.logging import setup_logging

    setup_logging("INFO" if verbose else "WARNING", settings.log_format, settings.log_dir)


@app.command()
def analyze(
    email: str = typer.Argument(..., help="Email address to score"),
    authorized: bool = typer.Option(
        True, "--authorized/--no-authorized", help="Confirm you may analyze this target"
    ),
    no_ai: bool = typer.Option(False, "--no-ai", help="Skip the AI explanation call"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response"),
) -> None:
    """
    [bold]Score an email address[/bold] with the four-signal model.

    Examples:
      tracemap analyze admin@example.com
      tracemap analyze john.doe@example.com --no-ai --json
    """
    from tracemap.core.exceptions import TraceMapError
    from tracemap.models import EmailAnalysisRequest

    service = _build_service(no_ai)
    request = EmailAnalysisRequest(email=email, authorized=authorized)
    try:
        result = _run_async(service.analyze_email(request))
    except TraceMapError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(result.model_dump(mode="json")))
        return
    _display_result("Email Exposure Analysis", email, result)


@app.command()
def module(
    module_type: str = typer.Argument(..., help="Text | Image | Location | Code"),
    input_value: str | None = typer.Argument(None, help="Identifier, file name or handle"),
    authorized: bool = typer.Option(
        True, "--authorized/--no-authorized", help="Confirm you may analyze this target"
    ),
    no_ai: bool = typer.Option(False, "--no-ai", help="Skip the AI explanation call"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response"),
) -> None:
    """
    [bold]Run a module analysis[/bold] (Text, Image, Location or Code).

    Examples:
      tracemap module Text root_admin
      tracemap module Location --no-ai
    """
    from tracemap.core.constants import ModuleType
    from tracemap.core.exceptions import TraceMapError
    from tracemap.models import ModuleAnalysisRequest

    try:
        selected = ModuleType(module_type.strip().title())
    except ValueError:
        console.print(
            f"[red]Error: Unknown module '{escape(module_type)}'. "
            f"Must be one of: {', '.join(m.value for m in ModuleType)}[/red]"
        )
        raise typer.Exit(1)

    service = _build_service(no_ai)
    request = ModuleAnalysisRequest(input_value=input_value, authorized=authorized)
    try:
        result = _run_async(service.analyze_module(request, selected))
    except TraceMapError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(result.model_dump(mode="json")))
        return
    _display_result(f"{selected.value} OSINT Analysis", input_value, result)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default: API_HOST)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Start the TraceMap HTTP API with uvicorn."""
    import uvicorn

    from tracemap.core.config import settings

    bind_host = host or settings.api_host
    bind_port = port or settings.api_port
    console.print(f"[bold cyan]TraceMap engine live on {bind_host}:{bind_port}[/bold cyan]")
    uvicorn.run("tracemap.main:app", host=bind_host, port=bind_port, reload=reload)


@app.command()
def config() -> None:
    """Show the explanation provider and whether its credential is set."""
    from tracemap.core.config import settings

    table = Table(title="[bold cyan]TraceMap Configuration[/bold cyan]", box=box.ROUNDED)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    configured = settings.provider_configured()
    table.add_row("AI provider", settings.ai_provider)
    table.add_row("AI model", settings.ai_model)
    table.add_row(
        "Credential",
        "[green]configured[/green]" if configured else "[red]missing[/red]",
    )
    table.add_row("AI explanations", "enabled" if settings.enable_ai_explanations else "disabled")
    table.add_row("Explanation timeout", f"{settings.explanation_timeout_seconds}s")
    table.add_row("API", f"{settings.api_host}:{settings.api_port}")
    console.print(table)

    if not configured:
        key_name = settings.provider_key_name() or "ollama_endpoint"
        console.print(
            f"[yellow]Set {key_name.upper()} in .env to enable AI explanations.[/yellow]"
        )


if __name__ == "__main__":
    app()
