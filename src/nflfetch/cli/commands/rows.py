"""Rows command for CLI."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from nflfetch.cli.main import app, fail, parse_format
from nflfetch.config import build_client, build_loader, load_settings
from nflfetch.core.context import CallContext
from nflfetch.core.exceptions import NflfetchError
from nflfetch.core.models import Source
from nflfetch.progress import RichProgressReporter


def _build_table(rows: list[dict[str, object]], limit: int) -> Table:
    table = Table()
    if not rows:
        return table
    for column in rows[0]:
        table.add_column(column)
    for row in rows[:limit]:
        table.add_row(*(str(value) for value in row.values()))
    return table


@app.command()
def rows(
    repository: str = typer.Argument(help="Repository as owner/name, or name under nflverse."),
    path: str = typer.Argument(help="Base path of the file inside the repository."),
    season: int = typer.Option(
        0,
        "--season",
        "-s",
        help="Season to load; falls back to the all-seasons file when unpublished.",
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        min=0,
        help="Maximum number of rows to display.",
    ),
    fmt: str | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Extension to append when PATH has none (csv or parquet).",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        min=0.001,
        help="Deadline in seconds for the whole load, fallback included.",
    ),
    progress: bool = typer.Option(
        False,
        "--progress",
        "-p",
        help="Show a download progress bar.",
    ),
) -> None:
    """Fetch a dataset file and show its first rows."""
    try:
        settings = load_settings()
        source = Source(repository, path, parse_format(fmt))
        ctx = CallContext(timeout=timeout or settings.timeout)

        if progress:
            with RichProgressReporter() as reporter:
                client = build_client(settings, progress=reporter)
                try:
                    result = build_loader(settings, client).load_with_provenance(
                        source, season, dict, ctx=ctx
                    )
                finally:
                    client.close()
        else:
            client = build_client(settings)
            try:
                result = build_loader(settings, client).load_with_provenance(
                    source, season, dict, ctx=ctx
                )
            finally:
                client.close()
    except NflfetchError as e:
        fail(e)

    console = Console()
    if result.records:
        console.print(_build_table(result.records, limit))
    shown = min(limit, len(result.records))
    typer.echo(f"{len(result.records)} row(s) from {result.url} ({shown} shown)")
    if result.fell_back:
        typer.echo(f"Season {season} is not published; used the all-seasons file.")
