"""Player directory published by nflverse."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

from nflfetch.core.mapping import get_int, get_str, get_upper
from nflfetch.core.models import Format, Source


if TYPE_CHECKING:
    from nflfetch.core.context import CallContext
    from nflfetch.core.services import DatasetLoader


SOURCE = Source("nflverse/nflverse-data", "data/players/players", Format.CSV)


@dataclass(frozen=True, slots=True)
class Player:
    """Identifiers and biographical fields for one player.

    Column names have changed between releases, so each field accepts
    several aliases when read. to_row() always writes the first one.
    """

    gsis_id: str = ""
    pfr_id: str = ""
    espn_id: str = ""
    pff_id: str = ""
    esb_id: str = ""
    display_name: str = ""
    first_name: str = ""
    last_name: str = ""
    short_name: str = ""
    football_name: str = ""
    position: str = ""
    position_group: str = ""
    ngs_position: str = ""
    latest_team: str = ""
    status: str = ""
    height: int = 0
    weight: int = 0
    birth_date: str = ""
    college_name: str = ""
    draft_team: str = ""
    draft_year: int = 0
    draft_round: int = 0
    draft_pick: int = 0
    years_of_experience: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> Player:
        """Build a Player from a parsed row; missing fields stay empty."""
        return cls(
            gsis_id=get_str(row, "gsis_id", "gsisid"),
            pfr_id=get_str(row, "pfr_id", "pfr"),
            espn_id=get_str(row, "espn_id"),
            pff_id=get_str(row, "pff_id"),
            esb_id=get_str(row, "esb_id", "football_db_id"),
            display_name=get_str(row, "display_name", "player_name", "name_full", "name"),
            first_name=get_str(row, "first_name", "name_first", "firstname"),
            last_name=get_str(row, "last_name", "name_last", "lastname"),
            short_name=get_str(row, "short_name", "name_short"),
            football_name=get_str(row, "football_name", "name_football"),
            position=get_upper(row, "position"),
            position_group=get_upper(row, "position_group"),
            ngs_position=get_upper(row, "ngs_position"),
            latest_team=get_upper(row, "latest_team", "team", "recent_team"),
            status=get_upper(row, "status"),
            height=get_int(row, "height", "height_in"),
            weight=get_int(row, "weight", "weight_lb"),
            birth_date=get_str(row, "birth_date", "birthdate"),
            college_name=get_str(row, "college_name", "college"),
            draft_team=get_upper(row, "draft_team"),
            draft_year=get_int(row, "draft_year"),
            draft_round=get_int(row, "draft_round"),
            draft_pick=get_int(row, "draft_pick"),
            years_of_experience=get_int(row, "years_of_experience", "years_exp"),
        )

    def to_row(self) -> dict[str, str]:
        return {f.name: str(getattr(self, f.name)) for f in fields(self)}


def load_players(
    *,
    loader: DatasetLoader | None = None,
    ctx: CallContext | None = None,
) -> list[Player]:
    """Load every player in the directory."""
    if loader is None:
        from nflfetch.defaults import get_default_loader

        loader = get_default_loader()
    return loader.load_from_source(SOURCE, 0, Player.from_row, ctx=ctx)
