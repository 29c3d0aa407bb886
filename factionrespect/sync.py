"""FactionRespect sync orchestrator.

Drives the Torn client, the analysis layer, the dataset cache and the state
store for one set of credentials.

Sync flow:
  full_sync         roster + every attack in the window, replace the dataset
  incremental_sync  fetch only what the cached dataset lacks (at most an
                    older and a newer range), merge, re-aggregate

A failed sync leaves the previous dataset and cache entry untouched; the
error is recorded in the store and re-raised to the caller.

Usage:
    from config.settings import SyncConfig
    from factionrespect.sync import FactionSync

    sync = FactionSync(SyncConfig(api_key="..."))
    report = asyncio.run(sync.incremental_sync(TimeFilter(preset="7d")))
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from config.settings import SyncConfig
from factionrespect.analysis.aggregator import aggregate_member_stats, process_attacks
from factionrespect.analysis.filter_engine import filter_attacks
from factionrespect.analysis.sync_planner import merge_attacks, plan_incremental_fetch
from factionrespect.clients.torn_client import ProgressCallback, TornClient
from factionrespect.errors import ConfigurationError
from factionrespect.io.cache import DatasetCache
from factionrespect.io.exporters import export_member_stats
from factionrespect.models.attacks import RawAttack
from factionrespect.models.dataset import FactionDataset, SyncMode, SyncReport
from factionrespect.models.filters import FilterState, TimeFilter, default_filter_state
from factionrespect.models.members import MemberStats
from factionrespect.state import (
    AppState,
    Store,
    clear_data,
    load_cached_data,
    set_api_key,
    set_dataset,
    set_error,
    set_filtered_stats,
    set_filters,
    set_has_cached_data,
    set_loading,
)
from factionrespect.utils.logging_utils import get_sync_logger
from factionrespect.utils.time_windows import resolve_window

logger = logging.getLogger(__name__)


def _make_sync_id(mode: str) -> str:
    """Generate a sortable sync ID of the form ``YYYYMMDD_HHMMSS_<mode>``."""
    return f"{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}_{mode}"


def _offset_progress(
    on_progress: Optional[ProgressCallback],
    already_fetched: int,
) -> Optional[ProgressCallback]:
    # Sub-fetches report counts from zero; keep the caller's count cumulative
    if on_progress is None:
        return None

    def report(count: int, total: Optional[int]) -> None:
        on_progress(already_fetched + count, total)

    return report


class FactionSync:
    """Owns the store, cache and client for one api key.

    Args:
        config: Runtime configuration. Its api key, if any, seeds the store.
        store: State store (by default a fresh one using ``config.default_time_preset``).
        client: Torn client; built from ``config`` on first use when omitted.
        cache: Dataset cache; a file cache under ``config.cache_dir`` by default.
        clock: Wall clock in epoch seconds, injectable for tests.
    """

    def __init__(
        self,
        config: SyncConfig,
        store: Optional[Store] = None,
        client: Optional[TornClient] = None,
        cache: Optional[DatasetCache] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.store = store or Store(
            AppState(filters=default_filter_state(TimeFilter(preset=config.default_time_preset)))
        )
        self.cache = cache or DatasetCache.at(config.cache_dir)
        self._client = client
        self._clock = clock

        if config.api_key and self.store.state.api_key is None:
            self.store.dispatch(set_api_key, config.api_key)
            self.store.dispatch(set_has_cached_data, self.cache.has(config.api_key))

    @property
    def state(self) -> AppState:
        return self.store.state

    # ── Credentials ──────────────────────────────────────────────────────────────

    def _require_key(self) -> str:
        api_key = self.state.api_key
        if not api_key:
            raise ConfigurationError("A Torn API key is required before syncing")
        return api_key

    @property
    def client(self) -> TornClient:
        """Torn client for the current key, built on first use."""
        api_key = self._require_key()
        if self._client is None:
            self._client = TornClient.from_config(replace(self.config, api_key=api_key))
        elif self._client.api_key != api_key:
            self._client.set_api_key(api_key)
        return self._client

    def set_api_key(self, api_key: str) -> None:
        """Switch to a different api key.

        The in-memory dataset is dropped when the key changes; the cache is
        left alone and consulted for the new key.

        Raises:
            ConfigurationError: If the key is empty.
        """
        api_key = (api_key or "").strip()
        if not api_key:
            raise ConfigurationError("API key cannot be empty")
        self.store.dispatch(set_api_key, api_key)
        self.store.dispatch(set_has_cached_data, self.cache.has(api_key))

    # ── Filtering ────────────────────────────────────────────────────────────────

    def _filtered_stats(self, dataset: FactionDataset, filters: FilterState) -> List[MemberStats]:
        selected = filter_attacks(dataset.attacks, filters, roster=dataset.roster, now=self._clock())
        return aggregate_member_stats(selected, dataset.roster)

    def update_filters(self, filters: FilterState) -> List[MemberStats]:
        """Apply a new filter selection and recompute the filtered view.

        The time-filter choice is remembered in the cache directory.

        Returns:
            Member statistics over the filtered attacks (empty without data).
        """
        self.store.dispatch(set_filters, filters)
        self.cache.save_time_filter(filters.time)

        dataset = self.state.dataset
        if dataset is None:
            return []
        stats = self._filtered_stats(dataset, filters)
        self.store.dispatch(set_filtered_stats, stats)
        return stats

    def _adopt_time_filter(self, time_filter: Optional[TimeFilter]) -> TimeFilter:
        if time_filter is None:
            return self.state.filters.time
        if time_filter != self.state.filters.time:
            self.store.dispatch(set_filters, replace(self.state.filters, time=time_filter))
            self.cache.save_time_filter(time_filter)
        return time_filter

    # ── Cache ────────────────────────────────────────────────────────────────────

    def restore_cached(self) -> bool:
        """Load the saved time filter and the cached dataset for the current key.

        Returns:
            True when a dataset was restored.
        """
        api_key = self._require_key()

        saved_filter = self.cache.load_time_filter()
        if saved_filter is not None:
            self.store.dispatch(set_filters, replace(self.state.filters, time=saved_filter))

        cached = self.cache.get(api_key)
        if cached is None:
            self.store.dispatch(set_has_cached_data, False)
            return False

        self.store.dispatch(load_cached_data, cached.dataset, cached.last_sync)
        self.store.dispatch(set_filtered_stats, self._filtered_stats(cached.dataset, self.state.filters))
        return True

    def clear_cache(self) -> None:
        """Drop the cached dataset for the current key; the in-memory one stays."""
        self.cache.clear(self._require_key())
        self.store.dispatch(set_has_cached_data, False)

    def clear_data(self) -> None:
        """Forget the key, the dataset and the cache entry."""
        api_key = self.state.api_key
        if api_key:
            self.cache.clear(api_key)
        self.store.dispatch(clear_data)
        self.close()

    def _commit(self, dataset: FactionDataset) -> datetime:
        api_key = self._require_key()
        last_sync = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        filtered = self._filtered_stats(dataset, self.state.filters)

        written = self.cache.set(api_key, dataset, last_sync)
        self.store.dispatch(set_dataset, dataset, last_sync, filtered)
        self.store.dispatch(set_has_cached_data, written)
        return last_sync

    # ── Sync ─────────────────────────────────────────────────────────────────────

    def _begin(self) -> None:
        self.store.dispatch(set_error, None)
        self.store.dispatch(set_loading, True)

    def _fail(self, exc: Exception) -> None:
        self.store.dispatch(set_error, str(exc) or "Failed to load faction data")

    async def full_sync(
        self,
        time_filter: Optional[TimeFilter] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncReport:
        """Fetch the roster and every attack in the window, replacing the dataset.

        Args:
            time_filter: Window to fetch (defaults to the current filter's window).
            on_progress: Called as ``(fetched_count, total_hint)`` after each page.

        Returns:
            SyncReport for the run.

        Raises:
            ConfigurationError: If no api key is set.
            TornAPIError: On any upstream failure.
            PaginationLimitError: If the batch ceiling was reached.
        """
        client = self.client
        time_filter = self._adopt_time_filter(time_filter)
        window = resolve_window(time_filter, self._clock())
        report = SyncReport(
            sync_id=_make_sync_id(SyncMode.FULL),
            mode=SyncMode.FULL,
            window=window,
            start_time=datetime.now(timezone.utc),
        )
        log = get_sync_logger(__name__, report.sync_id)
        log.info("Full sync for window %s (from=%s, to=%s)", time_filter.preset, window.from_ts, window.to_ts)

        self._begin()
        try:
            result = await client.fetch_all_attacks(window.from_ts, window.to_ts, on_progress)
        except Exception as exc:
            log.error("Full sync failed: %s", exc)
            self._fail(exc)
            raise

        attacks, member_stats = process_attacks(result.attacks, result.roster)
        dataset = FactionDataset(attacks=attacks, roster=result.roster, member_stats=member_stats)
        self._commit(dataset)

        report.terminations.append(result.termination)
        report.fetched_attacks = len(result.attacks)
        report.total_attacks = len(attacks)
        report.end_time = datetime.now(timezone.utc)
        log.info(
            "Full sync complete in %.1fs | attacks=%d | members=%d | termination=%s",
            report.elapsed_seconds, len(attacks), len(member_stats), result.termination,
        )
        return report

    async def incremental_sync(
        self,
        time_filter: Optional[TimeFilter] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncReport:
        """Bring the dataset up to ``time_filter``'s window with minimal fetching.

        Uses the in-memory dataset, else the cached one, else falls back to
        full_sync(). At most two ranges are fetched (older, newer), merged
        with the held attacks, deduplicated by code and re-aggregated
        against the roster already held.

        Args:
            time_filter: Requested window (defaults to the current filter's window).
            on_progress: Called as ``(fetched_count, total_hint)`` after each page.

        Returns:
            SyncReport for the run.

        Raises:
            ConfigurationError: If no api key is set.
            TornAPIError: On any upstream failure; nothing is merged.
            PaginationLimitError: If a sub-fetch reached the batch ceiling.
        """
        api_key = self._require_key()
        time_filter = self._adopt_time_filter(time_filter)

        base = self.state.dataset
        if base is None:
            cached = self.cache.get(api_key)
            if cached is not None:
                self.store.dispatch(load_cached_data, cached.dataset, cached.last_sync)
                base = cached.dataset

        if base is None:
            logger.info("No cached dataset, falling back to a full sync")
            return await self.full_sync(time_filter, on_progress)

        client = self.client
        now = self._clock()
        window = resolve_window(time_filter, now)
        held: Sequence[RawAttack] = base.raw_attacks
        ranges = plan_incremental_fetch(held, window, now, self.config.stale_tolerance_seconds)

        report = SyncReport(
            sync_id=_make_sync_id(SyncMode.INCREMENTAL),
            mode=SyncMode.INCREMENTAL,
            window=window,
            start_time=datetime.now(timezone.utc),
            ranges=list(ranges),
            cached=True,
        )
        log = get_sync_logger(__name__, report.sync_id)

        if not ranges:
            log.info("Cached attacks already cover the requested window, nothing to fetch")
            self.store.dispatch(set_filtered_stats, self._filtered_stats(base, self.state.filters))
            report.total_attacks = len(base.attacks)
            report.end_time = datetime.now(timezone.utc)
            return report

        self._begin()
        fetched: List[RawAttack] = []
        try:
            for fetch_range in ranges:
                log.info(
                    "Fetching %s attacks (from=%s, to=%s)",
                    fetch_range.direction, fetch_range.from_ts, fetch_range.to_ts,
                )
                result = await client.fetch_attack_range(
                    fetch_range.from_ts,
                    fetch_range.to_ts,
                    _offset_progress(on_progress, len(fetched)),
                )
                fetched.extend(result.attacks)
                report.terminations.append(result.termination)
        except Exception as exc:
            log.error("Incremental sync failed, keeping the previous dataset: %s", exc)
            self._fail(exc)
            raise

        merged = merge_attacks(held, fetched)
        attacks, member_stats = process_attacks(merged, base.roster)
        dataset = FactionDataset(attacks=attacks, roster=base.roster, member_stats=member_stats)
        self._commit(dataset)

        report.fetched_attacks = len(fetched)
        report.total_attacks = len(attacks)
        report.end_time = datetime.now(timezone.utc)
        log.info(
            "Incremental sync complete in %.1fs | fetched=%d | merged=%d | members=%d",
            report.elapsed_seconds, len(fetched), len(attacks), len(member_stats),
        )
        return report

    # ── Export ───────────────────────────────────────────────────────────────────

    def export(self, fmt: str, output_dir: Optional[str | Path] = None) -> Optional[Path]:
        """Write the filtered member statistics as CSV or JSON.

        Returns:
            Path of the written file, or None when there is no dataset yet.
        """
        if self.state.dataset is None:
            logger.warning("Nothing to export: no dataset loaded")
            return None
        return export_member_stats(
            self.state.filtered_stats,
            fmt,
            output_dir or self.config.export_dir,
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
