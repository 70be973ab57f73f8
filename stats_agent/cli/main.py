"""Command-line client for the Statistics Agent using Typer and Rich."""

import asyncio
import json
from enum import Enum
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from stats_agent import __version__
from stats_agent.agents.clients import OrchestratorClient
from stats_agent.config.logging import configure_logging, get_logger
from stats_agent.config.settings import settings
from stats_agent.errors import InvalidRequestError, StatsAgentError
from stats_agent.orchestration.continuation import ContinuationPolicy, run_with_continuation
from stats_agent.schemas import OrchestrationRequest, OrchestrationResponse

# Initialize CLI app
app = typer.Typer(
    help="Statistics Agent - find verified statistics from reputable sources",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")


class OutputFormat(str, Enum):
    json = "json"
    text = "text"
    both = "both"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        configure_logging("DEBUG")


async def _search(
    request: OrchestrationRequest,
    orchestrator_url: str,
    rounds: int,
) -> OrchestrationResponse:
    async with OrchestratorClient(
        orchestrator_url, timeout=settings.orchestrator_timeout
    ) as client:
        return await run_with_continuation(
            client.orchestrate,
            request,
            ContinuationPolicy(max_rounds=rounds),
        )


def _print_summary(response: OrchestrationResponse) -> None:
    status = "[yellow]partial[/yellow]" if response.partial else "[green]complete[/green]"
    console.print(Panel(
        f"Topic: {response.topic}\n"
        f"Found: {response.verified_count}/{response.target_count} verified statistics "
        f"(from {response.total_candidates} candidates)\n"
        f"Failed verification: {response.failed_count}\n"
        f"Attempts: {response.attempts}\n"
        f"Timestamp: {response.timestamp:%Y-%m-%d %H:%M:%S}\n"
        f"Status: {status}",
        title="Statistics Search Results",
        border_style="cyan",
    ))


def _print_statistics(response: OrchestrationResponse) -> None:
    table = Table(title="Verified Statistics", show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=3)
    table.add_column("Statistic", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_column("Source", style="yellow")
    for i, stat in enumerate(response.statistics, start=1):
        table.add_row(str(i), stat.name, f"{stat.value:g} {stat.unit}".strip(), stat.source)
    console.print(table)

    for i, stat in enumerate(response.statistics, start=1):
        console.print(f"\n[bold]{i}. {stat.name}[/bold]")
        console.print(f"   URL: {stat.source_url}", soft_wrap=True)
        console.print(f'   Excerpt: "{stat.excerpt}"', soft_wrap=True)
        console.print(f"   Date found: {stat.date_found:%Y-%m-%d}")


@app.command()
def search(
    topic: str = typer.Argument(..., help="Topic to find statistics about"),
    min_stats: int = typer.Option(
        10, "--min-stats", "-n", min=1, help="Target number of verified statistics"
    ),
    max_candidates: int = typer.Option(
        30, "--max-candidates", "-m", min=1, help="Candidate ceiling for the first round"
    ),
    reputable_only: bool = typer.Option(
        True, "--reputable-only/--any-source", help="Restrict to reputable sources"
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.both, "--output", "-o", case_sensitive=False, help="Output format"
    ),
    rounds: int = typer.Option(
        3, "--rounds", min=1, help="Orchestration rounds when results are partial"
    ),
    orchestrator_url: Optional[str] = typer.Option(
        None, "--orchestrator-url", help="Orchestration service URL [default: ORCHESTRATOR_URL]"
    ),
) -> None:
    """
    Search for verified statistics on a topic.

    Exits with status 1 if the orchestration service fails and 2 on
    invalid options.
    """
    if not topic.strip():
        raise typer.BadParameter("topic must not be empty", param_hint="TOPIC")

    url = orchestrator_url or settings.orchestrator_url
    request = OrchestrationRequest(
        topic=topic,
        min_verified=min_stats,
        max_candidates=max_candidates,
        reputable_only=reputable_only,
    )
    logger.info(f"Searching statistics: {topic!r} (target {min_stats}, url {url})")

    if output is not OutputFormat.json:
        sources = "reputable sources" if reputable_only else "any source"
        console.print(f"[bold cyan]Searching for statistics about:[/bold cyan] {topic}")
        console.print(f"[dim]Target: {min_stats} verified statistics from {sources}[/dim]\n")

    try:
        response = asyncio.run(_search(request, url, rounds))
    except InvalidRequestError as e:
        console.print(f"[red]✗[/red] Invalid request: {e}")
        raise typer.Exit(2)
    except StatsAgentError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        logger.error(f"Search failed: {e}")
        raise typer.Exit(1)

    if output is OutputFormat.json:
        typer.echo(response.model_dump_json(indent=2))
        return

    _print_summary(response)
    if not response.statistics:
        console.print("No verified statistics found.")
        return

    if output is OutputFormat.both:
        console.print("\n[bold]Verified Statistics (JSON)[/bold]")
        typer.echo(json.dumps(
            [stat.model_dump(mode="json") for stat in response.statistics], indent=2
        ))
    _print_statistics(response)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Run the orchestration service (POST /orchestrate, GET /health)."""
    import uvicorn

    logger.info(f"Starting orchestration service on {host}:{port}")
    uvicorn.run("stats_agent.api.server:app", host=host, port=port, log_config=None)


@app.command()
def status() -> None:
    """
    Display configuration.

    Shows collaborator endpoints, providers, engine limits and logging.
    """
    table = Table(title="Statistics Agent Configuration", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=20)
    table.add_column("Setting", style="green")
    table.add_column("Details", style="yellow")

    table.add_row("Orchestrator", settings.orchestrator_url, f"client timeout {settings.orchestrator_timeout:g}s")
    table.add_row(
        "Source discovery",
        settings.search_provider,
        settings.research_agent_url if settings.search_provider == "service" else
        ("API key set" if settings.serper_api_key else "⚠ SERPER_API_KEY not set"),
    )
    table.add_row("Extraction", "service", settings.synthesis_agent_url)
    table.add_row(
        "Verification",
        settings.verifier,
        settings.verification_agent_url if settings.verifier == "service" else "in-process excerpt match",
    )
    table.add_row(
        "Engine",
        f"max_retries={settings.max_retries}",
        f"min_batch={settings.min_batch}, lookahead={settings.lookahead_margin}, "
        f"dedupe={settings.dedupe_candidates}, deadline={settings.orchestration_deadline:g}s",
    )
    table.add_row("Logging", settings.log_level, f"Format: {settings.log_format}")

    console.print(table)


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]Statistics Agent[/bold]")
    console.print(f"Version: {__version__}")


if __name__ == "__main__":
    app()
