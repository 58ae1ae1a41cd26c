"""CLI entry point for ensure-update."""

from __future__ import annotations

import logging
import math
from datetime import timedelta
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape

from ensure_update import __version__
from ensure_update.config import EnsureUpdateConfig, load_config
from ensure_update.durations import format_duration, parse_duration
from ensure_update.errors import ConfigError, UsageError
from ensure_update.models import RunOutcome
from ensure_update.orchestrator import Orchestrator
from ensure_update.store import TimestampStore, normalize_path
from ensure_update.vcs import create_updater

app = typer.Typer(
    name="ensure-update",
    help="Pull a git working copy, but only if the last update is older than an interval.",
    add_completion=False,
)

err_console = Console(stderr=True)

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _configure_logging(level: str, verbose: bool) -> None:
    resolved = _LOG_LEVELS[level]
    if verbose:
        resolved = min(resolved, logging.INFO)
    logging.basicConfig(level=resolved, format="%(levelname)s:%(name)s:%(message)s")
    logging.getLogger("ensure_update").setLevel(resolved)


def _duration_option(value: str | None, option: str) -> timedelta | None:
    if value is None:
        return None
    try:
        return parse_duration(value)
    except UsageError as e:
        raise typer.BadParameter(str(e), param_hint=f"'{option}'") from e


def _target_argument(value: str) -> str:
    """Reject targets that can never be a working copy before touching state."""
    target = normalize_path(value)
    if not target.exists():
        raise typer.BadParameter(f"path does not exist: {value}")
    if not target.is_dir():
        raise typer.BadParameter(f"not a directory: {value}")
    if target == Path(target.anchor):
        raise typer.BadParameter("refusing to update the filesystem root")
    return str(target)


def _version_callback(value: bool) -> None:
    if value:
        rprint(f"ensure-update {__version__}")
        raise typer.Exit()


def _remaining_text(remaining: timedelta) -> str:
    """Round up to whole minutes so a just-refreshed 8h interval reads '8h'."""
    if remaining >= timedelta(minutes=1):
        minutes = math.ceil(remaining.total_seconds() / 60)
        if minutes < timedelta.max.days * 24 * 60:
            remaining = timedelta(minutes=minutes)
    return format_duration(remaining)


def _report(outcome: RunOutcome, verbose: bool) -> None:
    """Print the outcome. Failures always go to stderr; the rest only with -v."""
    if outcome.status == "update_failed":
        cause = outcome.failure.detail if outcome.failure else "unknown error"
        err_console.print(f"[red]Update failed:[/red] {escape(cause)}")
        return

    if outcome.store_warning:
        err_console.print(
            f"[yellow]Warning:[/yellow] update not recorded, the next run will "
            f"update again: {escape(outcome.store_warning)}"
        )

    if not verbose:
        return

    if outcome.status == "up_to_date":
        remaining = outcome.remaining or timedelta(0)
        rprint(
            f"[green]Already up to date.[/green] "
            f"Next update due in {_remaining_text(remaining)}."
        )
        return

    if outcome.dry_run:
        rprint(f"[yellow]Would update[/yellow] ({outcome.decision.reason}).")
        return

    result = outcome.update
    if result is None:
        rprint("[green]Updated.[/green]")
        return
    if result.output:
        rprint(f"[dim]{escape(result.output)}[/dim]")
    if not result.changed:
        rprint("[green]Updated.[/green] (no new changes)")
    elif result.before and result.after:
        rprint(f"[green]Updated.[/green] ({result.before[:7]}..{result.after[:7]})")
    else:
        rprint("[green]Updated.[/green]")


@app.command()
def main(
    path: Annotated[
        str,
        typer.Argument(help="Git working copy to update", callback=_target_argument),
    ],
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Print status and git output")
    ] = False,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Ignore the last update time")
    ] = False,
    interval: Annotated[
        str | None,
        typer.Option(
            "--interval",
            "-i",
            help="Maximum age of the last update, e.g. 8h, 2h30m, 1d (default: 8h)",
        ),
    ] = None,
    timeout: Annotated[
        str | None,
        typer.Option("--timeout", help="Give up on git after this long, e.g. 5m"),
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Report the decision without updating")
    ] = False,
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to config.yaml")
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=_version_callback, is_eager=True),
    ] = None,
) -> None:
    """Update PATH with git pull unless it was updated within the interval."""
    interval_delta = _duration_option(interval, "--interval")
    timeout_delta = _duration_option(timeout, "--timeout")

    try:
        cfg: EnsureUpdateConfig = load_config(config)
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    _configure_logging(cfg.log_level, verbose)

    updater = create_updater(
        cfg.vcs,
        timeout=timeout_delta.total_seconds() if timeout_delta is not None else None,
    )
    orchestrator = Orchestrator(
        TimestampStore(cfg.store.state_dir),
        updater,
        lock_timeout=cfg.store.lock_timeout,
    )

    outcome = orchestrator.run(
        path,
        interval=interval_delta if interval_delta is not None else cfg.interval,
        force=force,
        dry_run=dry_run,
    )
    _report(outcome, verbose)
    raise typer.Exit(outcome.exit_code)
