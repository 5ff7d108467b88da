"""Cache maintenance commands for CLI."""

from __future__ import annotations

from pathlib import Path

import typer

from nflfetch.adapters.cache import FilesystemResponseCache
from nflfetch.cli.main import app, fail
from nflfetch.config import load_settings
from nflfetch.core.exceptions import NflfetchError


cache_app = typer.Typer(
    name="cache",
    help="Inspect and prune the on-disk response cache.",
    no_args_is_help=True,
)
app.add_typer(cache_app)


def _format_size(size_bytes: int) -> str:
    """Format size in bytes to human-readable format."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


def _open_cache(directory: Path | None) -> FilesystemResponseCache:
    try:
        settings = load_settings()
    except NflfetchError as e:
        fail(e)
    return FilesystemResponseCache(directory or settings.cache_dir, ttl=settings.cache_ttl)


_DIR_OPTION = typer.Option(
    None,
    "--dir",
    "-d",
    help="Cache directory. Defaults to NFLFETCH_CACHE_DIR.",
)


@cache_app.command()
def info(directory: Path | None = _DIR_OPTION) -> None:
    """Show where the cache lives and how much it holds."""
    cache = _open_cache(directory)
    stats = cache.statistics()
    typer.echo(f"Cache directory: {cache.cache_dir}")
    typer.echo(f"  Entries: {stats['entries']}")
    typer.echo(f"  Files: {stats['file_count']}")
    typer.echo(f"  Size: {_format_size(stats['total_size'])}")
    if cache.ttl:
        typer.echo(f"  TTL: {cache.ttl:g}s")
    else:
        typer.echo("  TTL: none")


@cache_app.command()
def clear(directory: Path | None = _DIR_OPTION) -> None:
    """Remove every cached response."""
    cache = _open_cache(directory)
    count = cache.clear()
    typer.echo(f"Removed {count} cached response(s).")


@cache_app.command()
def cleanup(directory: Path | None = _DIR_OPTION) -> None:
    """Remove expired and unreadable cached responses."""
    cache = _open_cache(directory)
    count = cache.cleanup()
    typer.echo(f"Removed {count} expired response(s).")
