"""Per-member attack aggregation for FactionRespect.

Folds classified attacks into MemberStats buckets keyed by attacker id.
Pure functions: no I/O or external calls.

Fair-fight efficiency is a running mean over attacks with a fair-fight
modifier above 1, but its denominator is the member's total attack count so
far, not the count of qualifying attacks.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config.defaults import SUCCESSFUL_RESULTS
from factionrespect.analysis.classifier import classify_attacks
from factionrespect.models.attacks import ClassifiedAttack, RawAttack
from factionrespect.models.members import FactionMember, MemberStats, QuickStats

logger = logging.getLogger(__name__)


def is_successful(result: str) -> bool:
    return result in SUCCESSFUL_RESULTS


def _new_bucket(attack: ClassifiedAttack, member: Optional[FactionMember]) -> MemberStats:
    attacker = attack.attacker
    return MemberStats(
        member_id=attacker.id,
        name=attacker.name,
        level=attacker.level,
        is_current_member=member is not None,
        position=member.position if member is not None else None,
        days_in_faction=member.days_in_faction if member is not None else None,
    )


def _fold_attack(stats: MemberStats, attack: ClassifiedAttack) -> None:
    stats.total_attacks += 1
    successful = is_successful(attack.result)

    if successful:
        stats.successful_attacks += 1
        stats.total_respect += attack.respect_gain
        # Best hits are tracked separately for regular and bonus attacks
        if attack.is_bonus_hit:
            stats.best_bonus_hit = max(stats.best_bonus_hit, attack.respect_gain)
        else:
            stats.best_single_hit = max(stats.best_single_hit, attack.respect_gain)

    if attack.is_war:
        stats.war_attacks += 1
        if successful:
            stats.war_respect += attack.respect_gain

    if attack.is_chain:
        stats.chain_attacks += 1
        if successful:
            stats.chain_respect += attack.respect_gain

    if attack.is_bonus_hit:
        stats.bonus_hits += 1

    if attack.is_stealthed:
        stats.stealth_attacks += 1

    fair_fight = attack.modifiers.fair_fight
    if fair_fight > 1:
        n = stats.total_attacks
        stats.fair_fight_efficiency = (stats.fair_fight_efficiency * (n - 1) + fair_fight) / n


def _finalize(stats: MemberStats) -> MemberStats:
    if stats.total_attacks > 0:
        stats.success_rate = stats.successful_attacks / stats.total_attacks * 100
        stats.average_respect_per_attack = stats.total_respect / stats.total_attacks
    else:
        stats.success_rate = 0.0
        stats.average_respect_per_attack = 0.0

    if stats.successful_attacks > 0:
        stats.average_respect_per_success = stats.total_respect / stats.successful_attacks
    else:
        stats.average_respect_per_success = 0.0
    return stats


def aggregate_member_stats(
    attacks: Iterable[ClassifiedAttack],
    roster: Sequence[FactionMember],
) -> List[MemberStats]:
    """Compute per-member statistics.

    Buckets are created lazily on an attacker's first attack, seeded from
    the roster when the attacker is a current member.

    Args:
        attacks: Classified attacks, in any order.
        roster: Current faction members.

    Returns:
        MemberStats sorted by total respect descending; ties keep the order
        in which attackers first appeared. Empty input yields an empty list.
    """
    members_by_id: Dict[int, FactionMember] = {member.id: member for member in roster}
    buckets: Dict[int, MemberStats] = {}

    for attack in attacks:
        member_id = attack.attacker.id
        stats = buckets.get(member_id)
        if stats is None:
            stats = _new_bucket(attack, members_by_id.get(member_id))
            buckets[member_id] = stats
        _fold_attack(stats, attack)

    finalized = [_finalize(stats) for stats in buckets.values()]
    return sorted(finalized, key=lambda s: s.total_respect, reverse=True)


def process_attacks(
    attacks: Iterable[RawAttack],
    roster: Sequence[FactionMember],
) -> Tuple[List[ClassifiedAttack], List[MemberStats]]:
    """Discard attackerless records, classify, and aggregate.

    Args:
        attacks: Raw attacks as fetched or cached.
        roster: Current faction members.

    Returns:
        Tuple of (classified attacks, member stats).
    """
    classified = classify_attacks(attacks)
    logger.debug("Processing %d attacks for analysis", len(classified))
    return classified, aggregate_member_stats(classified, roster)


def compute_quick_stats(member_stats: Sequence[MemberStats]) -> QuickStats:
    """Summarize a member-stats list for the dashboard header.

    The top performer is the first entry, so the list is expected in the
    order aggregate_member_stats() returns it.
    """
    if not member_stats:
        return QuickStats()

    return QuickStats(
        total_attacks=sum(s.total_attacks for s in member_stats),
        total_respect=sum(s.total_respect for s in member_stats),
        average_success_rate=sum(s.success_rate for s in member_stats) / len(member_stats),
        top_performer=member_stats[0],
    )
