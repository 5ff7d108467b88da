"""Parallel load example with several seasons.

One FetchClient (and its cache) is safe to share between threads. This
example loads seasons concurrently with a thread pool, shows progress
bars, and cancels outstanding work through a shared event.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from nflfetch import CallContext, FetchClient, MemoryResponseCache, RichProgressReporter
from nflfetch.config import build_loader
from nflfetch.datasets import load_snap_counts


cancel = threading.Event()

with RichProgressReporter() as progress:
    client = FetchClient(cache=MemoryResponseCache(), progress=progress)
    loader = build_loader(client=client)

    def load(season: int):
        # Each task gets its own deadline; the cancel event is shared
        ctx = CallContext(timeout=60, cancel_event=cancel)
        return season, load_snap_counts(season, loader=loader, ctx=ctx)

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = dict(pool.map(load, range(2020, 2025)))

for season, snaps in sorted(results.items()):
    print(f"{season}: {len(snaps)} snap count rows")

# For strictly sequential loads of many seasons, load_snap_counts_seasons
# issues one request per season in increasing order:
# from nflfetch.datasets import load_snap_counts_seasons
# snaps = load_snap_counts_seasons([2022, 2023, 2024], loader=loader)

# Setting the event makes every in-flight fetch raise FetchCancelledError
# at its next chunk boundary:
# cancel.set()

client.close()
