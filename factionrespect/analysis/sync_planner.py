"""Incremental sync planning for FactionRespect.

Works out which ranges still need fetching when the analysis window changes,
and merges newly fetched attacks into the cached set. Pure functions; the
fetching itself is done by FactionSync.incremental_sync().
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from config.defaults import STALE_TOLERANCE_SECONDS
from factionrespect.models.attacks import RawAttack
from factionrespect.models.dataset import FetchRange, TimeWindow
from factionrespect.utils.time_windows import resolve_window

logger = logging.getLogger(__name__)

__all__ = ["resolve_window", "cached_span", "plan_incremental_fetch", "merge_attacks"]


def cached_span(attacks: Sequence[RawAttack], now: float) -> Tuple[int, int]:
    """Return (oldest, newest) ``started`` timestamps of the cached set.

    An empty cache reports ``oldest = now`` and ``newest = 0``, so any window
    needs both older and newer data.
    """
    if not attacks:
        return int(now), 0
    started = [attack.started for attack in attacks]
    return min(started), max(started)


def plan_incremental_fetch(
    cached_attacks: Sequence[RawAttack],
    window: TimeWindow,
    now: float,
    stale_tolerance: int = STALE_TOLERANCE_SECONDS,
) -> List[FetchRange]:
    """Compute the sub-fetches needed to cover ``window``.

    Older data is needed when the window starts before the oldest cached
    attack; an open lower bound always counts as older. Newer data is needed
    when the window has no upper bound or extends past the newest cached
    attack, and the cache is more than ``stale_tolerance`` seconds behind now;
    it never starts before the window does. An empty cache gets a single
    fetch of the whole window.

    Args:
        cached_attacks: Attacks currently cached.
        window: Resolved target window.
        now: Reference time in epoch seconds.
        stale_tolerance: Seconds of lag tolerated before fetching newer data.

    Returns:
        Zero, one or two FetchRange objects, older first.
    """
    if not cached_attacks:
        # Nothing held: one fetch of the window itself
        logger.debug("Incremental plan for window [%s, %s] against an empty cache", window.from_ts, window.to_ts)
        return [FetchRange(from_ts=window.from_ts, to_ts=window.to_ts, direction="newer")]

    oldest, newest = cached_span(cached_attacks, now)
    ranges: List[FetchRange] = []

    if window.from_ts is None or window.from_ts < oldest:
        ranges.append(FetchRange(from_ts=window.from_ts, to_ts=oldest - 1, direction="older"))

    extends_past_cache = window.to_ts is None or window.to_ts > newest
    if extends_past_cache and now - newest > stale_tolerance:
        start = newest + 1 if window.from_ts is None else max(newest + 1, window.from_ts)
        ranges.append(FetchRange(from_ts=start, to_ts=window.to_ts, direction="newer"))

    logger.debug(
        "Incremental plan for window [%s, %s] against cache [%d, %d]: %s",
        window.from_ts, window.to_ts, oldest, newest,
        [(r.direction, r.from_ts, r.to_ts) for r in ranges] or "nothing to fetch",
    )
    return ranges


def merge_attacks(
    cached: Iterable[RawAttack],
    fetched: Iterable[RawAttack],
) -> List[RawAttack]:
    """Merge cached and fetched attacks.

    Deduplicates by attack code with the first occurrence winning (cached
    records take precedence), then sorts by ``started`` descending.
    """
    by_code: Dict[str, RawAttack] = {}
    for source in (cached, fetched):
        for attack in source:
            if attack.code not in by_code:
                by_code[attack.code] = attack
    return sorted(by_code.values(), key=lambda a: a.started, reverse=True)
