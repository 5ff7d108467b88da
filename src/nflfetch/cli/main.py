"""CLI commands for nflfetch."""

from __future__ import annotations

from typing import NoReturn

import typer

from nflfetch.config import load_settings
from nflfetch.core.exceptions import NflfetchError
from nflfetch.core.models import Format, Source
from nflfetch.core.urls import resolve_source_url
from nflfetch.log import configure_logging


app = typer.Typer(
    name="nflfetch",
    help="Fetch and inspect nflverse datasets published on GitHub.",
    no_args_is_help=True,
)


def fail(error: NflfetchError) -> NoReturn:
    """Print an error and its recovery hint to stderr, then exit with status 1."""
    typer.echo(f"Error: {error}", err=True)
    if error.recovery_hint:
        typer.echo(f"Hint: {error.recovery_hint}", err=True)
    raise typer.Exit(1) from None


def parse_format(value: str | None) -> Format | None:
    """Parse a --format option, exiting on unknown names."""
    if value is None:
        return None
    try:
        return Format.parse(value)
    except NflfetchError as e:
        fail(e)


@app.callback()
def _root(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log requests, cache hits and fallbacks to stderr.",
    ),
) -> None:
    """Fetch and inspect nflverse datasets published on GitHub."""
    try:
        settings = load_settings()
    except NflfetchError as e:
        fail(e)
    configure_logging(verbose or settings.verbose)


@app.command()
def url(
    repository: str = typer.Argument(help="Repository as owner/name, or name under nflverse."),
    path: str = typer.Argument(help="Base path of the file inside the repository."),
    season: int = typer.Option(
        0,
        "--season",
        "-s",
        help="Season to scope the path to; 0 for the all-seasons file.",
    ),
    fmt: str | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Extension to append when PATH has none (csv or parquet).",
    ),
) -> None:
    """Print the raw-file URL a season-scoped request would use."""
    try:
        source = Source(repository, path, parse_format(fmt))
        typer.echo(resolve_source_url(source, season))
    except NflfetchError as e:
        fail(e)


def main() -> None:
    """Entry point for the CLI."""
    app()
