"""Main Typer application.

Entry point: ``imagesmith`` (configured via pyproject.toml scripts).

Commands: run, once, status, check.
"""

from __future__ import annotations

import logging
import signal
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from imagesmith import __version__
from imagesmith.agent import Agent, build_agent, startup_checks
from imagesmith.config import AgentConfig
from imagesmith.core.state_store import BuildStateStore, StoreError
from imagesmith.models.outcomes import CycleReport

console = Console()
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="imagesmith",
    help="Imagesmith: build and publish container images for new commits.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def configure_logging(level: str) -> None:
    """Route all log records through Rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _load_config() -> AgentConfig:
    try:
        config = AgentConfig()
    except ValidationError as exc:
        console.print(f"[bold red]Invalid configuration:[/bold red]\n{escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    configure_logging(config.log_level)
    return config


def _checked_agent(skip_checks: bool) -> Agent:
    agent = build_agent(_load_config())
    if skip_checks:
        return agent
    try:
        startup_checks(agent)
    except Exception as exc:
        console.print(f"[bold red]Startup check failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    return agent


def _print_report(report: CycleReport) -> None:
    if report.source_error:
        console.print(f"[bold red]Change source error:[/bold red] {escape(report.source_error)}")
        return
    table = Table(title="Poll cycle")
    table.add_column("Repository", style="cyan")
    table.add_column("Result")
    for name in report.succeeded:
        table.add_row(name, "[green]built[/green]")
    for name in report.failed:
        table.add_row(name, "[bold red]failed[/bold red]")
    for name in report.cancelled:
        table.add_row(name, "[yellow]cancelled[/yellow]")
    console.print(table)
    console.print(
        f"{report.candidates_pending} of {report.candidates_seen} "
        "watched repositories had new commits."
    )


@app.command(name="run", help="Poll and build forever (stop with Ctrl-C or SIGTERM).")
def run_cmd(
    skip_checks: bool = typer.Option(
        False, "--skip-checks", help="Skip registry/source/webhook checks at startup."
    ),
) -> None:
    """Run the agent loop until interrupted."""
    agent = _checked_agent(skip_checks)
    orchestrator = agent.orchestrator

    def _handle_signal(signum: int, _frame: object) -> None:
        logger.info("Received signal %s", signal.Signals(signum).name)
        orchestrator.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        orchestrator.run()
    except StoreError as exc:
        console.print(f"[bold red]State store failure, stopping:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@app.command(name="once", help="Run a single poll cycle and exit.")
def once_cmd(
    skip_checks: bool = typer.Option(
        False, "--skip-checks", help="Skip registry/source/webhook checks at startup."
    ),
) -> None:
    """Poll once, build whatever is new, and report."""
    agent = _checked_agent(skip_checks)
    try:
        report = agent.orchestrator.run_once()
    except StoreError as exc:
        console.print(f"[bold red]State store failure:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    _print_report(report)
    if report.failed or report.source_error:
        raise typer.Exit(code=1)


@app.command(name="status", help="Show the last built commit of every repository.")
def status_cmd(
    state_db: Path | None = typer.Option(
        None, "--state-db", help="State database path (defaults to configuration)."
    ),
) -> None:
    """List recorded builds."""
    db_path = state_db or _load_config().state_db_path
    if not Path(db_path).exists():
        console.print(f"[dim]No state store at {db_path}.[/dim]")
        return

    store = BuildStateStore(db_path)
    try:
        records = store.list_records()
    except StoreError as exc:
        console.print(f"[bold red]State store error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    if not records:
        console.print("[dim]No builds recorded yet.[/dim]")
        return

    table = Table(title="Recorded builds")
    table.add_column("Repository", style="cyan")
    table.add_column("Commit", style="green")
    table.add_column("Recorded (UTC)")
    for record in records:
        table.add_row(
            f"{record.owner}/{record.name}",
            record.commit_id[:12],
            record.recorded_at.strftime("%Y-%m-%d %H:%M:%S"),
        )
    console.print(table)


@app.command(name="check", help="Validate configuration and collaborators, then exit.")
def check_cmd() -> None:
    """Run the startup checks without polling."""
    agent = _checked_agent(skip_checks=False)
    watched = ", ".join(agent.config.watched_repos) or "(none)"
    console.print("[bold green]Configuration OK[/bold green]")
    console.print(f"Watching: {watched}")
    console.print(f"Poll interval: {agent.config.poll_interval_seconds}s")
    console.print(
        "Registry auth: "
        + ("configured" if agent.config.registry_auth_configured else "anonymous")
    )


@app.command(name="version", help="Show the installed version.")
def version_cmd() -> None:
    console.print(f"imagesmith {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
