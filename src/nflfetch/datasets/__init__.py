"""Typed loaders for individual nflverse datasets."""

from nflfetch.datasets.players import Player, load_players
from nflfetch.datasets.snapcounts import (
    RawSnapCounts,
    SeasonWeeks,
    SnapCount,
    current_season,
    expand_seasons,
    load_snap_counts,
    load_snap_counts_raw,
    load_snap_counts_seasons,
    load_snap_counts_selection,
    load_snap_counts_weeks,
    select_snap_counts,
    snap_count_urls,
)


__all__ = [
    "Player",
    "RawSnapCounts",
    "SeasonWeeks",
    "SnapCount",
    "current_season",
    "expand_seasons",
    "load_players",
    "load_snap_counts",
    "load_snap_counts_raw",
    "load_snap_counts_seasons",
    "load_snap_counts_selection",
    "load_snap_counts_weeks",
    "select_snap_counts",
    "snap_count_urls",
]
