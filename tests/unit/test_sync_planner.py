"""Unit tests for factionrespect.analysis.sync_planner.

Covers:
- cached_span on empty and populated caches
- plan_incremental_fetch: older/newer ranges, staleness tolerance, open windows
- merge_attacks: dedup by code (first wins), started-descending order
"""

from __future__ import annotations

from factionrespect.analysis.sync_planner import cached_span, merge_attacks, plan_incremental_fetch
from factionrespect.models.dataset import FetchRange, TimeWindow

FAR_FUTURE = 1_000_000


class TestCachedSpan:
    def test_empty_cache(self):
        assert cached_span([], now=5000) == (5000, 0)

    def test_populated(self, make_attack):
        attacks = [make_attack("b", 200), make_attack("a", 100), make_attack("c", 150)]
        assert cached_span(attacks, now=5000) == (100, 200)


class TestPlanIncrementalFetch:
    def test_older_and_newer_ranges(self, make_attack):
        """Cache [100, 200], window [50, 300], now far in the future."""
        cached = [make_attack("a", 100), make_attack("b", 200)]

        ranges = plan_incremental_fetch(cached, TimeWindow(50, 300), now=FAR_FUTURE)

        assert ranges == [
            FetchRange(from_ts=50, to_ts=99, direction="older"),
            FetchRange(from_ts=201, to_ts=300, direction="newer"),
        ]

    def test_window_inside_cache_needs_nothing(self, make_attack):
        cached = [make_attack("a", 100), make_attack("b", 200)]

        assert plan_incremental_fetch(cached, TimeWindow(120, 180), now=FAR_FUTURE) == []

    def test_fresh_cache_skips_newer_fetch(self, make_attack):
        """An open-ended window does not refetch when the cache is under 5 minutes old."""
        now = 10_000
        cached = [make_attack("a", now - 1000), make_attack("b", now - 100)]

        assert plan_incremental_fetch(cached, TimeWindow(from_ts=now - 500), now=now) == []

    def test_stale_cache_fetches_newer(self, make_attack):
        now = 10_000
        cached = [make_attack("a", now - 1000), make_attack("b", now - 301)]

        ranges = plan_incremental_fetch(cached, TimeWindow(from_ts=now - 500), now=now)

        assert ranges == [FetchRange(from_ts=now - 300, to_ts=None, direction="newer")]

    def test_stale_tolerance_configurable(self, make_attack):
        now = 10_000
        cached = [make_attack("a", now - 1000), make_attack("b", now - 100)]

        ranges = plan_incremental_fetch(cached, TimeWindow(from_ts=now - 500), now=now, stale_tolerance=60)

        assert [r.direction for r in ranges] == ["newer"]

    def test_unbounded_window_fetches_older_history(self, make_attack):
        cached = [make_attack("a", 100), make_attack("b", 200)]

        ranges = plan_incremental_fetch(cached, TimeWindow(), now=FAR_FUTURE)

        assert ranges[0] == FetchRange(from_ts=None, to_ts=99, direction="older")
        assert ranges[1] == FetchRange(from_ts=201, to_ts=None, direction="newer")

    def test_empty_cache_fetches_window_once(self):
        ranges = plan_incremental_fetch([], TimeWindow(50, 300), now=FAR_FUTURE)

        assert ranges == [FetchRange(from_ts=50, to_ts=300, direction="newer")]

    def test_empty_cache_relative_window_stays_bounded(self):
        """A quiet faction with nothing cached must not page back through all history."""
        now = 1_700_000_000

        ranges = plan_incremental_fetch([], TimeWindow(from_ts=now - 86400), now=now)

        assert ranges == [FetchRange(from_ts=now - 86400, to_ts=None, direction="newer")]

    def test_newer_range_starts_at_window_start(self, make_attack):
        """Cache [100, 200], window starting at 500: the gap before the window is skipped."""
        cached = [make_attack("a", 100), make_attack("b", 200)]

        ranges = plan_incremental_fetch(cached, TimeWindow(from_ts=500), now=FAR_FUTURE)

        assert ranges == [FetchRange(from_ts=500, to_ts=None, direction="newer")]


class TestMergeAttacks:
    def test_dedup_first_occurrence_wins(self, make_attack):
        cached = [make_attack("x", 100, respect_gain=1.0)]
        fetched = [make_attack("x", 100, respect_gain=9.0), make_attack("y", 300)]

        merged = merge_attacks(cached, fetched)

        assert [a.code for a in merged] == ["y", "x"]
        assert merged[1].respect_gain == 1.0

    def test_sorted_started_descending(self, make_attack):
        merged = merge_attacks(
            [make_attack("a", 100), make_attack("c", 300)],
            [make_attack("b", 200), make_attack("d", 50)],
        )

        assert [a.started for a in merged] == [300, 200, 100, 50]

    def test_merge_is_idempotent(self, make_attack):
        cached = [make_attack("a", 100), make_attack("b", 200)]

        once = merge_attacks(cached, cached)
        twice = merge_attacks(once, cached)

        assert [a.code for a in once] == [a.code for a in twice] == ["b", "a"]
