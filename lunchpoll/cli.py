"""Lunch poll CLI — Typer + Rich terminal interface.

Commands: run, show, list, config.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lunchpoll import __version__
from lunchpoll.errors import PollError
from lunchpoll.schemas.poll import Phase, PollSnapshot
from lunchpoll.settings import PollConfig, load_config

console = Console()

app = typer.Typer(
    name="lunchpoll",
    help="Pick a restaurant by quorum vote.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ───────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"lunchpoll {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option(
        "WARNING", "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    """Lunch poll — pick a restaurant by quorum vote."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ── Helpers ──────────────────────────────────────────────────────


def _load_config(config_path: Path | None = None) -> PollConfig:
    """Load poll config, exit on error."""
    try:
        return load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from None


def _phase_text(snapshot: PollSnapshot) -> Text:
    if snapshot.is_shut_down:
        return Text("SHUT DOWN", style="bright_red")
    return {
        Phase.SETUP: Text("SETUP", style="dim"),
        Phase.VOTING: Text("VOTING", style="yellow"),
        Phase.ENDED: Text("ENDED", style="green"),
    }[snapshot.phase]


def _display_snapshot(snapshot: PollSnapshot) -> None:
    meta = Table(
        title=f"Poll: {snapshot.title or snapshot.poll_id}",
        show_header=False, show_lines=True,
    )
    meta.add_column("Field", style="bold")
    meta.add_column("Value")
    meta.add_row("ID", snapshot.poll_id)
    meta.add_row("Manager", snapshot.manager)
    meta.add_row("Phase", _phase_text(snapshot))
    meta.add_row("Ballots", str(len(snapshot.ballots)))
    console.print(meta)

    votes = {t.candidate_id: t.votes for t in snapshot.tally}
    tally = Table(title="Tally")
    tally.add_column("#", justify="right", style="cyan")
    tally.add_column("Restaurant")
    tally.add_column("Votes", justify="right")
    for c in snapshot.candidates:
        style = "bold green" if c.candidate_id == snapshot.winner_id else ""
        tally.add_row(str(c.candidate_id), Text(c.name, style=style),
                      str(votes.get(c.candidate_id, 0)))
    console.print(tally)

    if snapshot.winner_name:
        console.print(Panel(
            f"[bold green]{snapshot.winner_name}[/bold green]",
            title="Winner", border_style="green",
        ))
    else:
        console.print("[dim]No winner was finalized.[/dim]")


# ── Commands ─────────────────────────────────────────────────────


@app.command()
def run(
    scenario_path: Path = typer.Argument(..., help="Scenario TOML file"),
    config_path: Path = typer.Option(
        None, "--config", "-c", help="Poll config TOML (default: bundled defaults)",
    ),
    no_persist: bool = typer.Option(
        False, "--no-persist", help="Do not save the finished poll",
    ),
) -> None:
    """Replay a poll scenario and show the result."""
    from lunchpoll.scenario import load_scenario, run_scenario

    config = _load_config(config_path)
    try:
        scenario = load_scenario(scenario_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading scenario:[/red] {e}")
        raise typer.Exit(1) from None

    try:
        poll, results = run_scenario(scenario, config)
    except PollError as e:
        console.print(f"[red]Poll setup rejected ({e.reason.value}):[/red] {e}")
        raise typer.Exit(1) from None

    steps = Table(title="Steps")
    steps.add_column("#", justify="right", style="dim")
    steps.add_column("Action", style="cyan")
    steps.add_column("Caller")
    steps.add_column("Result")
    steps.add_column("Detail", style="dim")
    for r in results:
        mark = Text("✓", style="green") if r.accepted else Text("✗", style="red")
        steps.add_row(str(r.index), r.action.value, r.caller, mark, r.detail)
    console.print(steps)

    snapshot = poll.snapshot()
    _display_snapshot(snapshot)

    if config.persist_results and not no_persist:
        from lunchpoll.persistence.database import close_db, init_db
        from lunchpoll.persistence.store import PollStore

        async def _save():
            db = await init_db(config.db_path)
            await PollStore(db).save_poll(snapshot)
            await close_db(db)

        asyncio.run(_save())
        console.print(f"[dim]Saved poll {snapshot.poll_id}[/dim]")


@app.command("list")
def list_polls(
    limit: int = typer.Option(20, "--limit", "-n", help="Max polls to show"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Poll config TOML"),
) -> None:
    """Show recently saved polls."""
    from lunchpoll.persistence.database import close_db, init_db
    from lunchpoll.persistence.store import PollStore

    config = _load_config(config_path)

    async def _list():
        db = await init_db(config.db_path)
        summaries = await PollStore(db).list_polls(limit=limit)
        await close_db(db)
        return summaries

    summaries = asyncio.run(_list())
    if not summaries:
        console.print("[dim]No polls found.[/dim]")
        return

    table = Table(title=f"Polls ({len(summaries)} shown)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", max_width=40)
    table.add_column("Phase")
    table.add_column("Ballots", justify="right")
    table.add_column("Winner")
    for s in summaries:
        phase = "shut down" if s.is_shut_down else s.phase.value
        table.add_row(
            s.poll_id[:8], s.title, phase, str(s.ballot_count), s.winner_name or "-",
        )
    console.print(table)


@app.command()
def show(
    poll_id: str = typer.Argument(..., help="Poll ID or prefix (min 4 chars)"),
    fmt: str = typer.Option(
        "table", "--format", "-f", help="Output format: table, json, or markdown",
    ),
    config_path: Path = typer.Option(None, "--config", "-c", help="Poll config TOML"),
) -> None:
    """Show a saved poll."""
    from lunchpoll.persistence.database import close_db, init_db
    from lunchpoll.persistence.export import export_json, export_markdown
    from lunchpoll.persistence.store import PollStore

    if fmt not in ("table", "json", "markdown"):
        console.print(f"[red]Unknown format:[/red] {fmt}")
        raise typer.Exit(1) from None

    config = _load_config(config_path)

    async def _get():
        db = await init_db(config.db_path)
        snapshot = await PollStore(db).get_poll(poll_id)
        await close_db(db)
        return snapshot

    snapshot = asyncio.run(_get())
    if not snapshot:
        console.print(f"[red]Poll not found:[/red] {poll_id}")
        raise typer.Exit(1) from None

    if fmt == "json":
        console.print_json(export_json(snapshot))
    elif fmt == "markdown":
        console.print(export_markdown(snapshot), markup=False, highlight=False)
    else:
        _display_snapshot(snapshot)


@app.command("config")
def show_config(
    config_path: Path = typer.Option(None, "--config", "-c", help="Poll config TOML"),
) -> None:
    """Show the effective poll configuration."""
    config = _load_config(config_path)

    table = Table(title="Poll Configuration", show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for field, value in config.model_dump().items():
        table.add_row(field, str(value))
    console.print(table)
