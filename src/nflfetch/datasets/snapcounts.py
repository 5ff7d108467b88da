"""Weekly snap counts published by nflverse (2012 onward).

Single-season loads go through the generic loader, with its fallback to
the all-seasons file. Multi-season, week-filtered and raw loads request one
URL per season and honor the ``NFLFETCH_SNAP_URL`` and
``NFLFETCH_SNAP_PATTERN`` overrides, so a mirror or a single combined file
can stand in for nflverse.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from nflfetch.config import load_settings
from nflfetch.core.mapping import first_non_empty, get_float, get_int, get_str, get_upper
from nflfetch.core.models import Format, Source
from nflfetch.core.parsing import sniff_media_type
from nflfetch.core.urls import resolve_source_url


if TYPE_CHECKING:
    from nflfetch.config import Settings
    from nflfetch.core.context import CallContext
    from nflfetch.core.services import DatasetLoader


logger = logging.getLogger(__name__)

SOURCE = Source("nflverse/nflverse-data", "data/snap_counts/snap_counts", Format.CSV)

FIRST_SEASON = 2012

# Regular season kicks off in September; earlier months belong to the
# previous season.
SEASON_START_MONTH = 9


def current_season(today: date | None = None) -> int:
    """Return the NFL season in progress (or most recently finished) on today.

    Examples:
        >>> current_season(date(2024, 10, 1))
        2024
        >>> current_season(date(2025, 2, 9))
        2024
    """
    today = today or date.today()
    return today.year if today.month >= SEASON_START_MONTH else today.year - 1


def expand_seasons(selector: int | Iterable[int] | bool | None) -> list[int]:
    """Turn a season selector into a sorted list of unique seasons.

    Args:
        selector: A single season, an iterable of seasons, True for every
            season with published snap counts, or None/False for the
            current season.

    Examples:
        >>> expand_seasons([2023, 2021, 2023])
        [2021, 2023]
        >>> expand_seasons(2022)
        [2022]
    """
    if selector is True:
        return list(range(FIRST_SEASON, current_season() + 1))
    if selector is None or selector is False:
        return [current_season()]
    if isinstance(selector, int):
        return [selector]
    return sorted(set(selector))


@dataclass(frozen=True, slots=True)
class SnapCount:
    """One player's snaps in one game."""

    game_id: str = ""
    pfr_game_id: str = ""
    season: int = 0
    game_type: str = ""
    week: int = 0
    player: str = ""
    pfr_player_id: str = ""
    position: str = ""
    team: str = ""
    opponent: str = ""
    offense_snaps: int = 0
    offense_pct: float = 0.0
    defense_snaps: int = 0
    defense_pct: float = 0.0
    st_snaps: int = 0
    st_pct: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> SnapCount:
        """Build a SnapCount from a parsed row; never raises."""
        return cls(
            game_id=first_non_empty(get_str(row, "game_id"), get_str(row, "gameid")),
            pfr_game_id=get_str(row, "pfr_game_id"),
            season=get_int(row, "season"),
            game_type=get_upper(row, "game_type", "gametype"),
            week=get_int(row, "week"),
            player=get_str(row, "player", "player_name"),
            pfr_player_id=get_str(row, "pfr_player_id", "player_id"),
            position=get_upper(row, "position"),
            team=get_upper(row, "team"),
            opponent=get_upper(row, "opponent"),
            offense_snaps=get_int(row, "offense_snaps", "offensive_snaps"),
            offense_pct=get_float(row, "offense_pct"),
            defense_snaps=get_int(row, "defense_snaps", "defensive_snaps"),
            defense_pct=get_float(row, "defense_pct"),
            st_snaps=get_int(row, "st_snaps"),
            st_pct=get_float(row, "st_pct"),
        )

    def to_row(self) -> dict[str, str]:
        """Render as a row with the published column names."""
        return {
            "game_id": self.game_id,
            "pfr_game_id": self.pfr_game_id,
            "season": str(self.season),
            "game_type": self.game_type,
            "week": str(self.week),
            "player": self.player,
            "pfr_player_id": self.pfr_player_id,
            "position": self.position,
            "team": self.team,
            "opponent": self.opponent,
            "offense_snaps": str(self.offense_snaps),
            "offense_pct": repr(self.offense_pct),
            "defense_snaps": str(self.defense_snaps),
            "defense_pct": repr(self.defense_pct),
            "st_snaps": str(self.st_snaps),
            "st_pct": repr(self.st_pct),
        }


@dataclass(frozen=True, slots=True)
class SeasonWeeks:
    """Weeks to keep from one season; no weeks keeps the whole season.

    Example:
        >>> SeasonWeeks(2024, [3, 1, 3])
        SeasonWeeks(season=2024, weeks=(1, 3))
    """

    season: int
    weeks: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "weeks", tuple(sorted(set(self.weeks))))


@dataclass(frozen=True, slots=True)
class RawSnapCounts:
    """One downloaded snap count file, left unparsed.

    Attributes:
        url: Where the bytes came from.
        data: The complete body.
        media_type: Media type sniffed from the first bytes of data.
    """

    url: str
    data: bytes
    media_type: str


def select_snap_counts(
    snaps: Iterable[SnapCount], selection: Iterable[SeasonWeeks]
) -> list[SnapCount]:
    """Keep the snaps whose season, and week where listed, is selected.

    A season named both with and without weeks keeps every week.
    """
    wanted: dict[int, set[int] | None] = {}
    for item in selection:
        if not item.weeks:
            wanted[item.season] = None
            continue
        current = wanted.get(item.season, set())
        if current is not None:
            wanted[item.season] = current | set(item.weeks)

    kept: list[SnapCount] = []
    for snap in snaps:
        if snap.season not in wanted:
            continue
        weeks = wanted[snap.season]
        if weeks is None or snap.week in weeks:
            kept.append(snap)
    return kept


def _loader(loader: DatasetLoader | None) -> DatasetLoader:
    if loader is not None:
        return loader
    from nflfetch.defaults import get_default_loader

    return get_default_loader()


def load_snap_counts(
    season: int = 0,
    *,
    loader: DatasetLoader | None = None,
    ctx: CallContext | None = None,
) -> list[SnapCount]:
    """Load snap counts for one season, or every season when season <= 0.

    A season file that is not published falls back to the all-seasons file.
    """
    return _loader(loader).load_from_source(SOURCE, season, SnapCount.from_row, ctx=ctx)


def snap_count_urls(seasons: Iterable[int], settings: Settings | None = None) -> list[str]:
    """URLs serving the given seasons, in increasing season order.

    ``snap_url`` replaces every season with one combined file and
    ``snap_pattern`` replaces the nflverse per-season URL.

    Example:
        >>> from nflfetch.config import Settings
        >>> mirror = Settings(snap_pattern="https://mirror.test/snaps_{season}.csv")
        >>> snap_count_urls([2024, 2023], mirror)
        ['https://mirror.test/snaps_2023.csv', 'https://mirror.test/snaps_2024.csv']
    """
    if settings is None:
        settings = load_settings()
    if settings.snap_url:
        return [settings.snap_url]
    ordered = sorted(set(seasons))
    if settings.snap_pattern:
        return [settings.snap_pattern.format(season=season) for season in ordered]
    return [resolve_source_url(SOURCE, season) for season in ordered]


def _fetch_snap_counts(
    seasons: Iterable[int],
    loader: DatasetLoader | None,
    settings: Settings,
    ctx: CallContext | None,
) -> list[SnapCount]:
    active = _loader(loader)
    snaps: list[SnapCount] = []
    for url in snap_count_urls(seasons, settings):
        rows = active.fetch_rows(url, ctx=ctx)
        logger.debug("%d snap count rows from %s", len(rows), url)
        snaps.extend(SnapCount.from_row(row) for row in rows)
    return snaps


def load_snap_counts_seasons(
    seasons: int | Iterable[int] | bool | None = None,
    *,
    loader: DatasetLoader | None = None,
    ctx: CallContext | None = None,
    settings: Settings | None = None,
) -> list[SnapCount]:
    """Load several seasons with one request each, in increasing order.

    Args:
        seasons: Selector accepted by expand_seasons().
        loader: Loader to use; the process-wide default when None.
        ctx: Deadline and cancellation covering every request.
        settings: Source of the snap URL overrides; load_settings() when None.

    Raises:
        NotFoundError: If any requested season is not published.
    """
    wanted = expand_seasons(seasons)
    if settings is None:
        settings = load_settings()
    snaps = _fetch_snap_counts(wanted, loader, settings, ctx)
    if settings.snap_url:
        # The combined file carries every season.
        snaps = select_snap_counts(snaps, [SeasonWeeks(season) for season in wanted])
    return snaps


def load_snap_counts_selection(
    selection: Iterable[SeasonWeeks],
    *,
    loader: DatasetLoader | None = None,
    ctx: CallContext | None = None,
    settings: Settings | None = None,
) -> list[SnapCount]:
    """Load the seasons named in selection and keep only the chosen weeks.

    Each season is fetched once however many entries name it.

    Example:
        >>> load_snap_counts_selection(  # doctest: +SKIP
        ...     [SeasonWeeks(2023, (17, 18)), SeasonWeeks(2024)]
        ... )
    """
    selection = list(selection)
    if not selection:
        return []
    if settings is None:
        settings = load_settings()
    seasons = {item.season for item in selection}
    return select_snap_counts(_fetch_snap_counts(seasons, loader, settings, ctx), selection)


def load_snap_counts_weeks(
    weeks: Iterable[int],
    season: int | None = None,
    *,
    loader: DatasetLoader | None = None,
    ctx: CallContext | None = None,
    settings: Settings | None = None,
) -> list[SnapCount]:
    """Load the given weeks of one season (the current season by default).

    An empty weeks iterable keeps the whole season.
    """
    chosen = SeasonWeeks(season if season is not None else current_season(), tuple(weeks))
    return load_snap_counts_selection([chosen], loader=loader, ctx=ctx, settings=settings)


def load_snap_counts_raw(
    seasons: int | Iterable[int] | bool | None = None,
    *,
    loader: DatasetLoader | None = None,
    ctx: CallContext | None = None,
    settings: Settings | None = None,
) -> list[RawSnapCounts]:
    """Download snap count files without parsing them.

    Returns one entry per URL: one per season, or a single entry when
    ``snap_url`` points at a combined file.
    """
    active = _loader(loader)
    blobs: list[RawSnapCounts] = []
    for url in snap_count_urls(expand_seasons(seasons), settings):
        data = active.fetch_bytes(url, ctx=ctx)
        blobs.append(RawSnapCounts(url, data, sniff_media_type(data)))
    return blobs
