"""CLI for nflfetch."""

# Import commands to register them with the app
# These imports have side effects (registering commands with @app.command())
from nflfetch.cli.commands import cache as _cache_module  # noqa: F401
from nflfetch.cli.commands import rows as _rows_module  # noqa: F401
from nflfetch.cli.main import app, main


__all__ = ["app", "main"]
