"""Main CLI entry point for the access journal.

Provides commands to inspect and maintain a file access time journal.
"""

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

import click
from rich.console import Console
from rich.table import Table

from access_journal.clock import current_time_millis
from access_journal.config import JournalConfig
from access_journal.errors import JournalError
from access_journal.journal import DefaultFileAccessTimeJournal
from access_journal.observability.logging import get_logger, set_journal_context, setup_logging

console = Console()
logger = get_logger(__name__)


def format_millis(millis: int) -> str:
    """Format epoch milliseconds as an ISO-8601 UTC timestamp."""
    try:
        moment = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return "out of range"
    return moment.isoformat(timespec="milliseconds")


@contextmanager
def open_journal(config: JournalConfig) -> Iterator[DefaultFileAccessTimeJournal]:
    """Open the configured journal, reporting journal errors as CLI errors.

    Yields:
        The open journal, closed on exit
    """
    try:
        with DefaultFileAccessTimeJournal(config) as journal:
            yield journal
    except JournalError as e:
        logger.error("journal_command_failed", error_code=e.error_code, **e.context)
        raise click.ClickException(e.message) from e


@click.group()
@click.version_option(version="0.1.0", prog_name="access-journal")
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory containing the journal (default: $ACCESS_JOURNAL_BASE_DIR).",
)
@click.option("--log-level", default="WARNING", show_default=True, help="Logging level.")
@click.option("--json-logs/--console-logs", default=False, help="Log format.")
@click.pass_context
def cli(ctx: click.Context, base_dir: Optional[Path], log_level: str, json_logs: bool) -> None:
    """Access journal - last access times of cached files."""
    setup_logging(log_level=log_level, json_logs=json_logs)
    config = JournalConfig.from_env()
    if base_dir is not None:
        config = config.model_copy(update={"base_dir": base_dir})
    set_journal_context(str(config.cache_dir))
    ctx.obj = config


@cli.command()
@click.pass_obj
def inception(config: JournalConfig) -> None:
    """Print the journal's inception timestamp."""
    with open_journal(config) as journal:
        console.print(
            f"{journal.inception_timestamp} ({format_millis(journal.inception_timestamp)})"
        )


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--at", "millis", type=int, default=None, help="Access time in epoch millis.")
@click.pass_obj
def record(config: JournalConfig, paths: tuple[Path, ...], millis: Optional[int]) -> None:
    """Record PATHS as last accessed now (or at --at)."""
    timestamp = current_time_millis() if millis is None else millis
    with open_journal(config) as journal:
        for path in paths:
            try:
                journal.set_last_access_time(path, timestamp)
            except ValueError as e:
                raise click.BadParameter(str(e), param_hint="--at") from e
    console.print(f"Recorded {len(paths)} path(s) at {format_millis(timestamp)}")


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.pass_obj
def forget(config: JournalConfig, paths: tuple[Path, ...]) -> None:
    """Delete the recorded access times of PATHS."""
    with open_journal(config) as journal:
        for path in paths:
            journal.delete_last_access_time(path)
    console.print(f"Forgot {len(paths)} path(s)")


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_obj
def show(config: JournalConfig, paths: tuple[Path, ...], as_json: bool) -> None:
    """Show the last access times of PATHS.

    A snapshot cannot tell a missing record from one stored at exactly the
    inception time, so both are reported as equal to inception.
    """
    with open_journal(config) as journal, journal.create_snapshot() as snapshot:
        rows = [(path, snapshot.get_last_access_time(path)) for path in paths]
        inception_timestamp = journal.inception_timestamp

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "path": str(path),
                        "last_access_time": millis,
                        "equals_inception": millis == inception_timestamp,
                    }
                    for path, millis in rows
                ],
                indent=2,
            )
        )
        return

    table = Table(title="Last access times")
    table.add_column("Path", style="cyan")
    table.add_column("Millis", justify="right")
    table.add_column("Time (UTC)")
    table.add_column("Equals inception")
    for path, millis in rows:
        equals_inception = "yes" if millis == inception_timestamp else "no"
        table.add_row(str(path), str(millis), format_millis(millis), equals_inception)
    console.print(table)


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
