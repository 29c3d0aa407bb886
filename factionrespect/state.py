"""Application state for FactionRespect.

AppState is an immutable snapshot. Every transition is a pure reducer
function ``(state, *args) -> AppState``; Store applies reducers one at a
time and swaps the current state in a single assignment, so readers never
observe a half-updated snapshot.

Usage:
    store = Store()
    store.subscribe(lambda state: print(state.is_loading))
    store.dispatch(set_loading, True)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from factionrespect.models.dataset import FactionDataset
from factionrespect.models.filters import FilterState, default_filter_state
from factionrespect.models.members import MemberStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppState:
    """Immutable application state snapshot."""

    api_key: Optional[str] = None
    is_loading: bool = False
    error: Optional[str] = None
    dataset: Optional[FactionDataset] = None
    filtered_stats: Sequence[MemberStats] = ()
    filters: FilterState = field(default_factory=default_filter_state)
    last_sync: Optional[datetime] = None
    has_cached_data: bool = False


Reducer = Callable[..., AppState]
Listener = Callable[[AppState], None]


# ── Reducers ─────────────────────────────────────────────────────────────────────


def set_api_key(state: AppState, api_key: Optional[str]) -> AppState:
    """Switch credentials. A different key drops the in-memory dataset."""
    api_key = (api_key or "").strip() or None
    if api_key == state.api_key:
        return replace(state, error=None)
    return replace(
        state,
        api_key=api_key,
        error=None,
        dataset=None,
        filtered_stats=(),
        last_sync=None,
        has_cached_data=False,
    )


def set_loading(state: AppState, is_loading: bool) -> AppState:
    return replace(state, is_loading=is_loading)


def set_error(state: AppState, error: Optional[str]) -> AppState:
    """Record an error message; clears the loading flag."""
    return replace(state, error=error, is_loading=False)


def set_dataset(
    state: AppState,
    dataset: FactionDataset,
    last_sync: datetime,
    filtered_stats: Optional[Sequence[MemberStats]] = None,
) -> AppState:
    """Commit a freshly synced dataset, optionally with its filtered view."""
    return replace(
        state,
        dataset=dataset,
        last_sync=last_sync,
        filtered_stats=state.filtered_stats if filtered_stats is None else tuple(filtered_stats),
        is_loading=False,
        error=None,
    )


def load_cached_data(state: AppState, dataset: FactionDataset, last_sync: datetime) -> AppState:
    """Restore a dataset from the cache without touching the loading flag."""
    return replace(state, dataset=dataset, last_sync=last_sync, error=None, has_cached_data=True)


def set_filters(state: AppState, filters: FilterState) -> AppState:
    return replace(state, filters=filters)


def set_filtered_stats(state: AppState, filtered_stats: Sequence[MemberStats]) -> AppState:
    return replace(state, filtered_stats=tuple(filtered_stats))


def set_has_cached_data(state: AppState, has_cached_data: bool) -> AppState:
    return replace(state, has_cached_data=has_cached_data)


def clear_data(state: AppState) -> AppState:
    """Forget everything, credentials included. Filters are reset."""
    return AppState()


# ── Store ────────────────────────────────────────────────────────────────────────


class Store:
    """Holds the current AppState and notifies subscribers on change.

    Args:
        initial: Starting state (defaults to an empty AppState).
    """

    def __init__(self, initial: Optional[AppState] = None) -> None:
        self._state = initial or AppState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, reducer: Reducer, *args: Any) -> AppState:
        """Apply ``reducer(state, *args)`` and publish the result to listeners."""
        new_state = reducer(self._state, *args)
        self._state = new_state
        logger.debug("State transition: %s", reducer.__name__)
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
