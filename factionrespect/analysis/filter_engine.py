"""Attack filtering for FactionRespect.

Applies a FilterState to a list of classified attacks. The time, attack and
member predicate groups are evaluated independently and combined with AND.
Filtering never mutates its input and keeps the original order.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Set

from factionrespect.models.attacks import ClassifiedAttack
from factionrespect.models.dataset import TimeWindow
from factionrespect.models.filters import AttackFilter, FilterState, MemberFilter
from factionrespect.models.members import FactionMember
from factionrespect.utils.time_windows import resolve_window

logger = logging.getLogger(__name__)


# ── Predicate groups ─────────────────────────────────────────────────────────────


def _matches_tri_state(expected: Optional[bool], modifier: float) -> bool:
    if expected is None:
        return True
    return (modifier > 1) == expected


def matches_attack_filter(attack: ClassifiedAttack, attack_filter: AttackFilter) -> bool:
    """Evaluate the attack-level predicates for a single attack."""
    if attack.attack_type not in attack_filter.attack_types:
        return False
    if attack.result not in attack_filter.results:
        return False

    modifiers = attack.modifiers
    if attack_filter.min_fair_fight is not None and modifiers.fair_fight < attack_filter.min_fair_fight:
        return False
    if attack_filter.max_fair_fight is not None and modifiers.fair_fight > attack_filter.max_fair_fight:
        return False

    if not _matches_tri_state(attack_filter.has_war_bonus, modifiers.war):
        return False
    if not _matches_tri_state(attack_filter.has_overseas_bonus, modifiers.overseas):
        return False
    if not _matches_tri_state(attack_filter.has_retaliation_bonus, modifiers.retaliation):
        return False

    if attack_filter.min_chain is not None and attack.chain < attack_filter.min_chain:
        return False
    if attack_filter.max_chain is not None and attack.chain > attack_filter.max_chain:
        return False

    # Bonus hits are excluded by flag, whatever their categorical type
    if not attack_filter.include_bonus_hits and attack.is_bonus_hit:
        return False

    return True


def matches_member_filter(
    attack: ClassifiedAttack,
    member_filter: MemberFilter,
    roster_ids: Optional[Set[int]] = None,
) -> bool:
    """Evaluate the attacker-level predicates for a single attack.

    Args:
        attack: Classified attack.
        member_filter: Member predicates.
        roster_ids: Ids of current members, or None when no roster is known.
    """
    attacker = attack.attacker
    if member_filter.selected_members and attacker.id not in member_filter.selected_members:
        return False

    query = member_filter.search_query.lower()
    if query and query not in attacker.name.lower():
        return False

    if roster_ids is not None:
        is_current = attacker.id in roster_ids
        if member_filter.current_members_only and not is_current:
            return False
        if member_filter.former_members_only and is_current:
            return False

    return True


# ── Public API ───────────────────────────────────────────────────────────────────


def filter_attacks(
    attacks: Sequence[ClassifiedAttack],
    filters: FilterState,
    roster: Optional[Sequence[FactionMember]] = None,
    now: Optional[float] = None,
) -> List[ClassifiedAttack]:
    """Select the attacks that satisfy every predicate group.

    Args:
        attacks: Classified attacks in any order.
        filters: Time, attack and member predicates.
        roster: Current faction members. The current/former member toggles
            are ignored when omitted.
        now: Evaluation time in epoch seconds for relative windows
            (defaults to the current time).

    Returns:
        New list holding the matching attacks in their original order.
    """
    window: TimeWindow = resolve_window(filters.time, now)
    roster_ids = {member.id for member in roster} if roster is not None else None

    selected = [
        attack
        for attack in attacks
        if window.contains(attack.started)
        and matches_attack_filter(attack, filters.attacks)
        and matches_member_filter(attack, filters.members, roster_ids)
    ]
    logger.debug(
        "Filter kept %d/%d attacks (time preset %s)",
        len(selected), len(attacks), filters.time.preset,
    )
    return selected
