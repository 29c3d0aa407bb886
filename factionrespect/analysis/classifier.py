"""Attack classification for FactionRespect.

Derives war/chain/bonus flags and a single categorical attack type from a
raw attack. Pure functions: no I/O or external calls.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from config.defaults import BONUS_HIT_VALUES, CHAIN_THRESHOLD
from factionrespect.models.attacks import AttackType, ClassifiedAttack, RawAttack

logger = logging.getLogger(__name__)


def is_bonus_hit_value(respect_gain: float) -> bool:
    """True when the respect gain is exactly a chain milestone bonus (10 × 2^k)."""
    return respect_gain in BONUS_HIT_VALUES


def is_war_attack(attack: RawAttack) -> bool:
    return attack.modifiers.war > 1 or attack.is_ranked_war


def is_chain_attack(attack: RawAttack) -> bool:
    return attack.chain > CHAIN_THRESHOLD


def categorize_attack(attack: RawAttack) -> str:
    """Resolve the attack type; the first matching category wins.

    Priority: retaliation > overseas > war > chain > bonus > regular.
    """
    if attack.modifiers.retaliation > 1:
        return AttackType.RETALIATION
    if attack.modifiers.overseas > 1:
        return AttackType.OVERSEAS
    if is_war_attack(attack):
        return AttackType.WAR
    if is_chain_attack(attack):
        return AttackType.CHAIN
    if is_bonus_hit_value(attack.respect_gain):
        return AttackType.BONUS
    return AttackType.REGULAR


def classify_attack(attack: RawAttack) -> ClassifiedAttack:
    """Enrich a raw attack with its derived fields.

    Args:
        attack: Raw attack with a non-null attacker.

    Returns:
        ClassifiedAttack wrapping the unchanged raw record.

    Raises:
        ValueError: If the attack has no attacker. Callers must run
            discard_attackerless() first.
    """
    if attack.attacker is None:
        raise ValueError(f"Attack {attack.code} is missing attacker data")

    return ClassifiedAttack(
        raw=attack,
        duration=attack.ended - attack.started,
        is_war=is_war_attack(attack),
        is_chain=is_chain_attack(attack),
        is_bonus_hit=is_bonus_hit_value(attack.respect_gain),
        attack_type=categorize_attack(attack),
    )


def discard_attackerless(attacks: Iterable[RawAttack]) -> List[RawAttack]:
    """Drop attacks whose attacker is hidden or missing."""
    return [attack for attack in attacks if attack.attacker is not None and attack.attacker.id]


def classify_attacks(attacks: Iterable[RawAttack]) -> List[ClassifiedAttack]:
    """Discard attackerless records and classify the rest, preserving order."""
    valid = discard_attackerless(attacks)
    return [classify_attack(attack) for attack in valid]
