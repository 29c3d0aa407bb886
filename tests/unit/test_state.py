"""Unit tests for factionrespect.state reducers and Store."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from factionrespect.models.dataset import FactionDataset
from factionrespect.models.filters import FilterState, TimeFilter
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

SYNCED_AT = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def dataset(sample_classified, sample_roster):
    return FactionDataset(attacks=sample_classified, roster=sample_roster, member_stats=[])


@pytest.fixture
def loaded_state(dataset):
    return AppState(api_key="key-a", dataset=dataset, last_sync=SYNCED_AT, has_cached_data=True)


class TestApiKeyReducer:
    def test_new_key_drops_dataset(self, loaded_state):
        state = set_api_key(loaded_state, "key-b")

        assert state.api_key == "key-b"
        assert state.dataset is None
        assert state.last_sync is None
        assert state.has_cached_data is False

    def test_same_key_keeps_dataset(self, loaded_state):
        state = set_api_key(set_error(loaded_state, "boom"), "  key-a  ")

        assert state.dataset is loaded_state.dataset
        assert state.error is None

    def test_blank_key_becomes_none(self):
        assert set_api_key(AppState(api_key="key-a"), "   ").api_key is None


class TestReducers:
    def test_loading_and_error(self):
        state = set_loading(AppState(), True)
        assert state.is_loading is True

        state = set_error(state, "upstream down")
        assert state.error == "upstream down"
        assert state.is_loading is False

    def test_set_dataset_commits_everything(self, dataset):
        state = set_loading(set_error(AppState(), "old"), True)
        state = set_dataset(state, dataset, SYNCED_AT, [])

        assert state.dataset is dataset
        assert state.last_sync == SYNCED_AT
        assert state.filtered_stats == ()
        assert state.is_loading is False
        assert state.error is None

    def test_set_dataset_keeps_previous_view_when_omitted(self, dataset):
        state = AppState(filtered_stats=("sentinel",))

        assert set_dataset(state, dataset, SYNCED_AT).filtered_stats == ("sentinel",)

    def test_load_cached_data(self, dataset):
        state = load_cached_data(set_loading(AppState(), True), dataset, SYNCED_AT)

        assert state.has_cached_data is True
        assert state.is_loading is True
        assert state.dataset is dataset

    def test_filters_and_stats(self):
        filters = FilterState(time=TimeFilter(preset="7d"))
        state = set_filtered_stats(set_filters(AppState(), filters), ["row"])

        assert state.filters is filters
        assert state.filtered_stats == ("row",)

    def test_has_cached_data(self):
        assert set_has_cached_data(AppState(), True).has_cached_data is True

    def test_clear_data(self, loaded_state):
        assert clear_data(loaded_state) == AppState()

    def test_reducers_do_not_mutate(self, loaded_state):
        set_loading(loaded_state, True)
        set_api_key(loaded_state, "key-b")

        assert loaded_state.is_loading is False
        assert loaded_state.api_key == "key-a"


class TestStore:
    def test_dispatch_replaces_state(self):
        store = Store()
        before = store.state

        after = store.dispatch(set_loading, True)

        assert store.state is after
        assert before.is_loading is False

    def test_listeners_notified_until_unsubscribed(self):
        store = Store()
        seen = []
        unsubscribe = store.subscribe(lambda state: seen.append(state.is_loading))

        store.dispatch(set_loading, True)
        unsubscribe()
        store.dispatch(set_loading, False)
        unsubscribe()

        assert seen == [True]

    def test_initial_state(self):
        assert Store(AppState(api_key="key-a")).state.api_key == "key-a"
