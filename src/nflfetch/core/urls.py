"""Pure helpers that turn repository coordinates into raw-file URLs.

These functions contain no I/O and are safe to use in the core domain.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nflfetch.core.exceptions import ConfigurationError
from nflfetch.core.models import Format


if TYPE_CHECKING:
    from nflfetch.core.models import Source


RAW_HOST = "https://raw.githubusercontent.com"
DEFAULT_OWNER = "nflverse"
BRANCH = "master"

_KNOWN_EXTENSIONS = tuple(fmt.extension for fmt in Format)


def split_repository(repository: str) -> tuple[str, str]:
    """Split "owner/name" (or bare "name") into owner and name.

    Raises:
        ConfigurationError: If the identifier is empty or has extra segments.

    Examples:
        >>> split_repository("nflverse/nflverse-data")
        ('nflverse', 'nflverse-data')
        >>> split_repository("nfldata")
        ('nflverse', 'nfldata')
    """
    parts = repository.strip().split("/")
    if len(parts) == 1:
        parts = [DEFAULT_OWNER, *parts]
    if len(parts) != 2 or not all(parts):
        raise ConfigurationError(f"unknown repository identifier {repository!r}")
    return parts[0], parts[1]


def raw_url(repository: str, path: str) -> str:
    """Build the raw-content URL for a file in a repository.

    The path is used verbatim; include the file extension where the
    publisher uses one.

    Examples:
        >>> raw_url("nflverse-data", "data/players/players.csv")
        'https://raw.githubusercontent.com/nflverse/nflverse-data/master/data/players/players.csv'
    """
    owner, name = split_repository(repository)
    return f"{RAW_HOST}/{owner}/{name}/{BRANCH}/{path}"


def season_path(base: str, season: int) -> str:
    """Return base for season <= 0, else base suffixed with "_<season>".

    Examples:
        >>> season_path("data/injuries/injuries", 2024)
        'data/injuries/injuries_2024'
        >>> season_path("data/injuries/injuries", 0)
        'data/injuries/injuries'
    """
    if season > 0:
        return f"{base}_{season}"
    return base


def with_extension(path: str, fmt: Format | None) -> str:
    """Append fmt's extension unless path already ends in a known one."""
    if fmt is None or path.lower().endswith(_KNOWN_EXTENSIONS):
        return path
    return f"{path}{fmt.extension}"


def resolve_source_url(
    source: Source, season: int = 0, default_format: Format | None = None
) -> str:
    """Resolve the URL of a source's season-scoped (or base) file."""
    path = season_path(source.base, season)
    path = with_extension(path, source.format or default_format)
    return raw_url(source.repository, path)
