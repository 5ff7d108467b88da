"""Basic dataset load example.

This example shows the simplest usage pattern: describe where a dataset
lives, build a client with a response cache, and load records. Repeat
loads send conditional requests and reuse the cached body on 304.
"""

from pathlib import Path

from nflfetch import DatasetLoader, FetchClient, FilesystemResponseCache, Format, Source
from nflfetch.datasets import load_snap_counts


# A dataset family: season files are "<base>_<season>.csv"
injuries = Source(
    repository="nflverse/nflverse-data",
    base="data/injuries/injuries",
    format=Format.CSV,
)

# Option 1: Manual wiring (full control over cache and timeout)
client = FetchClient(cache=FilesystemResponseCache(Path("./.nflfetch-cache"), ttl=3600))
loader = DatasetLoader(client)

# Option 2: Settings-driven wiring (reads .env and NFLFETCH_* variables)
# from nflfetch import build_loader
# loader = build_loader()

# Rows are dicts keyed by lower-cased column names
rows = loader.load_from_source(injuries, 2024, dict)
print(f"{len(rows)} injury report rows")

# load_with_provenance tells you which file actually served the rows
result = loader.load_with_provenance(injuries, 2031, dict)
if result.fell_back:
    print(f"2031 is not published; loaded {result.url} instead")

# Typed datasets map rows into dataclasses
snaps = load_snap_counts(2024, loader=loader)
busiest = max(snaps, key=lambda s: s.offense_snaps, default=None)
if busiest is not None:
    print(f"Most offensive snaps in one game: {busiest.player} ({busiest.offense_snaps})")

client.close()
