"""Unit tests for factionrespect.analysis.filter_engine.

Covers:
- Permissive filter passes everything through unchanged and in order
- Time predicates: relative windows measured from ``now``, "all", custom bounds
- Attack predicates: type/result allow-sets, fair fight and chain bounds,
  tri-state modifier checks, bonus-hit toggle
- Member predicates: selection, name search, current/former toggles with and without a roster
"""

from __future__ import annotations

from dataclasses import replace

from factionrespect.analysis.filter_engine import filter_attacks
from factionrespect.models.attacks import AttackResult, AttackType
from factionrespect.models.filters import (
    AttackFilter,
    FilterState,
    MemberFilter,
    TimeFilter,
    default_filter_state,
    permissive_filter_state,
)

NOW = 1_700_000_000


def _codes(attacks):
    return [a.code for a in attacks]


def _with_attacks(**kwargs) -> FilterState:
    return replace(permissive_filter_state(), attacks=AttackFilter(**kwargs))


def _with_members(**kwargs) -> FilterState:
    return replace(permissive_filter_state(), members=MemberFilter(**kwargs))


class TestPermissiveFilter:
    def test_round_trip(self, sample_classified):
        """A permissive filter must return the same attacks in the same order."""
        original = list(sample_classified)
        result = filter_attacks(sample_classified, permissive_filter_state(), now=NOW)

        assert result == original
        assert result is not sample_classified
        assert sample_classified == original


class TestTimeFilter:
    def test_relative_window_measured_from_now(self, make_classified):
        attacks = [
            make_classified("old", NOW - 7200),
            make_classified("edge", NOW - 3600),
            make_classified("new", NOW - 60),
        ]
        state = replace(permissive_filter_state(), time=TimeFilter(preset="1h"))

        assert _codes(filter_attacks(attacks, state, now=NOW)) == ["edge", "new"]
        # Same filter evaluated later drops what has aged out
        assert _codes(filter_attacks(attacks, state, now=NOW + 3000)) == ["new"]

    def test_default_window_is_24h(self, make_classified):
        attacks = [make_classified("day-old", NOW - 90_000), make_classified("fresh", NOW - 10)]

        assert _codes(filter_attacks(attacks, default_filter_state(), now=NOW)) == ["fresh"]

    def test_custom_bounds_inclusive(self, make_classified):
        attacks = [make_classified(str(t), t) for t in (99, 100, 150, 200, 201)]
        state = replace(permissive_filter_state(), time=TimeFilter(preset="custom", from_ts=100, to_ts=200))

        assert _codes(filter_attacks(attacks, state, now=NOW)) == ["100", "150", "200"]

    def test_custom_open_bound(self, make_classified):
        attacks = [make_classified(str(t), t) for t in (99, 100, 500)]
        state = replace(permissive_filter_state(), time=TimeFilter(preset="custom", from_ts=100))

        assert _codes(filter_attacks(attacks, state, now=NOW)) == ["100", "500"]


class TestAttackFilter:
    def test_type_allow_set(self, sample_classified):
        state = _with_attacks(attack_types=frozenset({AttackType.WAR, AttackType.CHAIN}))

        assert _codes(filter_attacks(sample_classified, state)) == ["a2", "a5"]

    def test_result_allow_set(self, sample_classified):
        state = _with_attacks(results=frozenset({AttackResult.LOST}))

        assert _codes(filter_attacks(sample_classified, state)) == ["a3"]

    def test_fair_fight_bounds(self, sample_classified):
        state = _with_attacks(min_fair_fight=2.0, max_fair_fight=2.5)

        assert _codes(filter_attacks(sample_classified, state)) == ["a2", "a4"]

    def test_chain_bounds(self, sample_classified):
        state = _with_attacks(min_chain=10, max_chain=14)

        assert _codes(filter_attacks(sample_classified, state)) == ["a5"]

    def test_tri_state_true_requires_modifier(self, sample_classified):
        state = _with_attacks(has_war_bonus=True)

        assert _codes(filter_attacks(sample_classified, state)) == ["a2"]

    def test_tri_state_false_excludes_modifier(self, sample_classified):
        state = _with_attacks(has_retaliation_bonus=False, has_overseas_bonus=False)

        assert _codes(filter_attacks(sample_classified, state)) == ["a1", "a2", "a5"]

    def test_bonus_toggle_excludes_by_flag_not_type(self, make_classified):
        """A war attack paying exactly 20 respect is still a bonus hit."""
        attacks = [
            make_classified("war-bonus", 100, respect_gain=20, war=2),
            make_classified("war-plain", 101, respect_gain=3, war=2),
        ]
        state = _with_attacks(include_bonus_hits=False)

        assert attacks[0].attack_type == AttackType.WAR
        assert _codes(filter_attacks(attacks, state)) == ["war-plain"]


class TestMemberFilter:
    def test_selected_members(self, sample_classified):
        state = _with_members(selected_members=frozenset({2}))

        assert _codes(filter_attacks(sample_classified, state)) == ["a3", "a5"]

    def test_search_is_case_insensitive_substring(self, sample_classified):
        state = _with_members(search_query="aLi")

        assert _codes(filter_attacks(sample_classified, state)) == ["a1", "a2"]

    def test_search_whitespace_is_significant(self, sample_classified):
        """The query is matched as typed; surrounding spaces are not trimmed."""
        state = _with_members(search_query=" alice")

        assert filter_attacks(sample_classified, state) == []

    def test_current_members_only(self, sample_classified, sample_roster):
        state = _with_members(current_members_only=True)

        assert "a4" not in _codes(filter_attacks(sample_classified, state, roster=sample_roster))

    def test_former_members_only(self, sample_classified, sample_roster):
        state = _with_members(former_members_only=True)

        assert _codes(filter_attacks(sample_classified, state, roster=sample_roster)) == ["a4"]

    def test_both_toggles_select_nothing(self, sample_classified, sample_roster):
        state = _with_members(current_members_only=True, former_members_only=True)

        assert filter_attacks(sample_classified, state, roster=sample_roster) == []

    def test_toggles_ignored_without_roster(self, sample_classified):
        state = _with_members(current_members_only=True, former_members_only=True)

        assert len(filter_attacks(sample_classified, state)) == len(sample_classified)
