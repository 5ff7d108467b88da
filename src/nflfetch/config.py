"""Configuration for nflfetch.

Settings are resolved in this order, later sources winning:

1. Built-in defaults
2. A ``.env`` file (current directory, else the project root)
3. ``NFLFETCH_*`` environment variables
4. Keyword overrides passed to ``load_settings()``

Recognized variables: ``NFLFETCH_CACHE`` (off, memory, filesystem),
``NFLFETCH_CACHE_DIR``, ``NFLFETCH_CACHE_TTL`` (seconds),
``NFLFETCH_PREFER`` (csv, parquet), ``NFLFETCH_TIMEOUT`` (seconds),
``NFLFETCH_USER_AGENT``, ``NFLFETCH_VERBOSE``, and the snap count URL
overrides ``NFLFETCH_SNAP_URL`` (one combined file) and
``NFLFETCH_SNAP_PATTERN`` (per-season URL with a ``{season}`` field).
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import dotenv_values

from nflfetch.core.exceptions import ConfigurationError
from nflfetch.core.models import Format


if TYPE_CHECKING:
    from nflfetch.adapters.http.client import FetchClient
    from nflfetch.core.ports import ProgressReporter, ResponseCachePort
    from nflfetch.core.services import DatasetLoader


ENV_PREFIX = "NFLFETCH_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


class CacheMode(StrEnum):
    """Which response cache the default client uses."""

    OFF = "off"
    MEMORY = "memory"
    FILESYSTEM = "filesystem"


def find_project_root(start: Path | None = None) -> Path:
    """Find the project root directory by walking up from start directory.

    Searches for marker files in the following priority order:
    1. .env - Local settings file
    2. pyproject.toml - Python project root
    3. .git - Version control root

    Args:
        start: Directory to start searching from. If None, uses current directory.

    Returns:
        Path to project root directory. Returns start directory if no markers found.
    """
    if start is None:
        start = Path.cwd()

    markers = [".env", "pyproject.toml", ".git"]
    current = start.resolve()

    for parent in [current, *current.parents]:
        for marker in markers:
            if (parent / marker).exists():
                return parent

    return start.resolve()


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "nflfetch"


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved runtime settings.

    Attributes:
        cache_mode: Response cache used by clients built from these settings.
        cache_dir: Directory for the filesystem cache.
        cache_ttl: Seconds a cached response is revalidated with; 0 disables expiry.
        prefer_format: Extension appended to sources that declare none.
        timeout: Default per-call deadline in seconds.
        user_agent: User-Agent header sent with every request.
        verbose: Enable debug logging in the CLI.
        snap_url: Single URL serving every season of snap counts, if set.
        snap_pattern: Per-season snap count URL template containing "{season}".
    """

    cache_mode: CacheMode = CacheMode.MEMORY
    cache_dir: Path = _default_cache_dir()
    cache_ttl: float = 24 * 60 * 60
    prefer_format: Format = Format.CSV
    timeout: float = 30.0
    user_agent: str = "nflfetch (+https://github.com/nflverse)"
    verbose: bool = False
    snap_url: str | None = None
    snap_pattern: str | None = None

    def build_cache(self) -> ResponseCachePort | None:
        """Create the response cache selected by cache_mode."""
        from nflfetch.adapters.cache import FilesystemResponseCache, MemoryResponseCache

        if self.cache_mode is CacheMode.OFF:
            return None
        if self.cache_mode is CacheMode.MEMORY:
            return MemoryResponseCache(ttl=self.cache_ttl)
        return FilesystemResponseCache(self.cache_dir, ttl=self.cache_ttl)


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_seconds(name: str, value: object, *, allow_zero: bool) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}")
    try:
        seconds = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}") from None
    if not math.isfinite(seconds):
        raise ConfigurationError(f"{name} must be a finite number of seconds, got {value!r}")
    if seconds < 0 or (seconds == 0 and not allow_zero):
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return seconds


def _parse_pattern(name: str, value: str) -> str:
    if "{season}" not in value:
        raise ConfigurationError(f"{name} must contain a {{season}} field, got {value!r}")
    try:
        value.format(season=2024)
    except (KeyError, IndexError, ValueError):
        raise ConfigurationError(
            f"{name} must only use the {{season}} field, got {value!r}"
        ) from None
    return value


def _parse_cache_mode(value: str) -> CacheMode:
    try:
        return CacheMode(value.strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in CacheMode)
        raise ConfigurationError(
            f"{ENV_PREFIX}CACHE must be one of {choices}, got {value!r}"
        ) from None


def _from_variables(variables: Mapping[str, str | None]) -> dict[str, Any]:
    """Convert NFLFETCH_* variables into Settings field values."""
    values: dict[str, Any] = {}

    def get(key: str) -> str | None:
        value = variables.get(ENV_PREFIX + key)
        return value if value is not None and value.strip() != "" else None

    if (mode := get("CACHE")) is not None:
        values["cache_mode"] = _parse_cache_mode(mode)
    if (cache_dir := get("CACHE_DIR")) is not None:
        values["cache_dir"] = Path(cache_dir).expanduser()
    if (ttl := get("CACHE_TTL")) is not None:
        values["cache_ttl"] = _parse_seconds(f"{ENV_PREFIX}CACHE_TTL", ttl, allow_zero=True)
    if (prefer := get("PREFER")) is not None:
        values["prefer_format"] = Format.parse(prefer)
    if (timeout := get("TIMEOUT")) is not None:
        values["timeout"] = _parse_seconds(f"{ENV_PREFIX}TIMEOUT", timeout, allow_zero=False)
    if (user_agent := get("USER_AGENT")) is not None:
        values["user_agent"] = user_agent
    if (verbose := get("VERBOSE")) is not None:
        values["verbose"] = _parse_bool(f"{ENV_PREFIX}VERBOSE", verbose)
    if (snap_url := get("SNAP_URL")) is not None:
        values["snap_url"] = snap_url.strip()
    if (snap_pattern := get("SNAP_PATTERN")) is not None:
        values["snap_pattern"] = _parse_pattern(f"{ENV_PREFIX}SNAP_PATTERN", snap_pattern.strip())
    return values


def _from_overrides(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Validate keyword overrides with the same rules as NFLFETCH_* variables.

    Typed values pass through; strings are parsed.
    """
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigurationError(f"unknown setting(s): {', '.join(unknown)}")

    values = dict(overrides)
    if "cache_mode" in values and not isinstance(values["cache_mode"], CacheMode):
        values["cache_mode"] = _parse_cache_mode(str(values["cache_mode"]))
    if "prefer_format" in values and not isinstance(values["prefer_format"], Format):
        values["prefer_format"] = Format.parse(str(values["prefer_format"]))
    if "cache_dir" in values:
        if not isinstance(values["cache_dir"], str | Path):
            raise ConfigurationError(f"cache_dir must be a path, got {values['cache_dir']!r}")
        values["cache_dir"] = Path(values["cache_dir"]).expanduser()
    if "cache_ttl" in values:
        values["cache_ttl"] = _parse_seconds("cache_ttl", values["cache_ttl"], allow_zero=True)
    if "timeout" in values:
        values["timeout"] = _parse_seconds("timeout", values["timeout"], allow_zero=False)
    if "user_agent" in values and not isinstance(values["user_agent"], str):
        raise ConfigurationError(f"user_agent must be a string, got {values['user_agent']!r}")
    if "verbose" in values and not isinstance(values["verbose"], bool):
        values["verbose"] = _parse_bool("verbose", str(values["verbose"]))
    if values.get("snap_url") is not None and not isinstance(values["snap_url"], str):
        raise ConfigurationError(f"snap_url must be a string, got {values['snap_url']!r}")
    if values.get("snap_pattern") is not None:
        if not isinstance(values["snap_pattern"], str):
            raise ConfigurationError(
                f"snap_pattern must be a string, got {values['snap_pattern']!r}"
            )
        values["snap_pattern"] = _parse_pattern("snap_pattern", values["snap_pattern"])
    return values


def _locate_env_file(env_file: str | Path | None) -> Path | None:
    if env_file is None:
        return None
    path = Path(env_file)
    if path.is_absolute() or path.exists():
        return path if path.exists() else None
    candidate = find_project_root() / path
    return candidate if candidate.exists() else None


def load_settings(
    *,
    env_file: str | Path | None = ".env",
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> Settings:
    """Resolve settings from defaults, .env, environment and overrides.

    Args:
        env_file: .env file to read. Relative names are looked up in the
            current directory, then the project root. None skips it.
        environ: Environment mapping; defaults to os.environ.
        **overrides: Settings field values that win over everything else.

    Returns:
        Frozen Settings.

    Raises:
        ConfigurationError: If a value is malformed or an override names an
            unknown field.

    Example:
        >>> settings = load_settings(env_file=None, environ={}, cache_mode="off")
        >>> settings.cache_mode
        <CacheMode.OFF: 'off'>
    """
    values: dict[str, Any] = {}

    if (path := _locate_env_file(env_file)) is not None:
        values.update(_from_variables(dotenv_values(path)))

    values.update(_from_variables(os.environ if environ is None else environ))

    values.update(_from_overrides(overrides))

    return replace(Settings(), **values)


def build_client(
    settings: Settings | None = None,
    progress: ProgressReporter | None = None,
) -> FetchClient:
    """Create a FetchClient configured from settings."""
    from nflfetch.adapters.http import FetchClient

    if settings is None:
        settings = load_settings()
    return FetchClient(
        cache=settings.build_cache(),
        user_agent=settings.user_agent,
        timeout=settings.timeout,
        progress=progress,
    )


def build_loader(
    settings: Settings | None = None,
    client: FetchClient | None = None,
) -> DatasetLoader:
    """Create a DatasetLoader configured from settings."""
    from nflfetch.core.services import DatasetLoader

    if settings is None:
        settings = load_settings()
    if client is None:
        client = build_client(settings)
    return DatasetLoader(client, default_format=settings.prefer_format)
