"""Unit tests for factionrespect.analysis.classifier.

Covers:
- Derived flags: duration, war, chain, bonus hit
- Attack type priority: retaliation > overseas > war > chain > bonus > regular
- Bonus-hit ladder membership
- Attackerless records: rejected by classify_attack, dropped by classify_attacks
"""

from __future__ import annotations

import pytest

from factionrespect.analysis.classifier import (
    classify_attack,
    classify_attacks,
    discard_attackerless,
    is_bonus_hit_value,
)
from factionrespect.models.attacks import AttackType


class TestBonusHitLadder:
    @pytest.mark.parametrize("value", [10 * 2 ** k for k in range(13)])
    def test_ladder_values_are_bonus_hits(self, value):
        assert is_bonus_hit_value(value)
        assert is_bonus_hit_value(float(value))

    @pytest.mark.parametrize("value", [0, 0.5, 5, 15, 30, 10.01, 100])
    def test_other_values_are_not(self, value):
        assert not is_bonus_hit_value(value)


class TestClassifyAttack:
    def test_war_outranks_chain(self, make_attack):
        """A war modifier of 2 must classify as war even on a 15-hit chain."""
        classified = classify_attack(make_attack("w", 100, chain=15, war=2))

        assert classified.is_war is True
        assert classified.is_chain is True
        assert classified.attack_type == AttackType.WAR

    def test_ranked_war_flag_counts_as_war(self, make_attack):
        classified = classify_attack(make_attack("rw", 100, is_ranked_war=True))

        assert classified.is_war is True
        assert classified.attack_type == AttackType.WAR

    def test_retaliation_outranks_everything(self, make_attack):
        classified = classify_attack(
            make_attack("r", 100, respect_gain=20, chain=50, retaliation=1.5, overseas=1.25, war=2)
        )
        assert classified.attack_type == AttackType.RETALIATION

    def test_overseas_outranks_war(self, make_attack):
        classified = classify_attack(make_attack("o", 100, overseas=1.25, war=2))
        assert classified.attack_type == AttackType.OVERSEAS

    def test_chain_threshold(self, make_attack):
        """Chain counts strictly above 9 are chain attacks."""
        assert classify_attack(make_attack("c9", 100, chain=9)).is_chain is False
        at_ten = classify_attack(make_attack("c10", 100, chain=10))
        assert at_ten.is_chain is True
        assert at_ten.attack_type == AttackType.CHAIN

    def test_chain_outranks_bonus(self, make_attack):
        classified = classify_attack(make_attack("cb", 100, chain=100, respect_gain=40))

        assert classified.is_bonus_hit is True
        assert classified.attack_type == AttackType.CHAIN

    def test_bonus_type(self, make_attack):
        classified = classify_attack(make_attack("b", 100, respect_gain=10))

        assert classified.is_bonus_hit is True
        assert classified.attack_type == AttackType.BONUS

    def test_regular(self, make_attack):
        classified = classify_attack(make_attack("plain", 100, respect_gain=2.37))

        assert classified.attack_type == AttackType.REGULAR
        assert not (classified.is_war or classified.is_chain or classified.is_bonus_hit)

    def test_duration(self, make_attack):
        assert classify_attack(make_attack("d", 100)).duration == 30

    def test_modifier_of_exactly_one_is_not_a_bonus(self, make_attack):
        classified = classify_attack(make_attack("one", 100, war=1.0, retaliation=1.0))
        assert classified.is_war is False
        assert classified.attack_type == AttackType.REGULAR

    def test_raw_fields_read_through(self, make_attack):
        raw = make_attack("rt", 123, respect_gain=3.0, chain=4, fair_fight=2.5)
        classified = classify_attack(raw)

        assert classified.raw is raw
        assert classified.code == "rt"
        assert classified.started == 123
        assert classified.respect_gain == 3.0
        assert classified.modifiers.fair_fight == 2.5

    def test_missing_attacker_raises(self, make_attack):
        with pytest.raises(ValueError):
            classify_attack(make_attack("anon", 100, attacker_id=None))

    def test_deterministic(self, make_attack):
        raw = make_attack("same", 100, chain=12, war=1.5)
        assert classify_attack(raw) == classify_attack(raw)


class TestClassifyAttacks:
    def test_fixture_classification(self, sample_classified):
        """Fixture attacks must classify as documented in conftest."""
        types = {a.code: a.attack_type for a in sample_classified}

        assert types == {
            "a1": AttackType.BONUS,
            "a2": AttackType.WAR,
            "a3": AttackType.RETALIATION,
            "a4": AttackType.OVERSEAS,
            "a5": AttackType.CHAIN,
        }

    def test_attackerless_dropped_order_preserved(self, sample_raw_attacks):
        kept = discard_attackerless(sample_raw_attacks)

        assert [a.code for a in kept] == ["a1", "a2", "a3", "a4", "a5"]

    def test_every_type_is_known(self, sample_classified):
        assert all(a.attack_type in AttackType.ALL for a in sample_classified)
