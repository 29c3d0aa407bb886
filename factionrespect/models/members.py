"""Faction roster and per-member statistics models for FactionRespect."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class FactionMember:
    """A current member of the faction, as returned by faction/members.

    The roster only ever describes the live faction: members who attacked
    during the analysis window but have since left do not appear here.
    """

    id: int
    name: str
    level: int = 0
    position: str = ""
    days_in_faction: int = 0
    is_revivable: bool = False
    is_on_wall: bool = False
    is_in_oc: bool = False
    has_early_discharge: bool = False
    last_action: Dict[str, Any] = field(default_factory=dict)   # {status, timestamp, relative}
    status: Dict[str, Any] = field(default_factory=dict)        # {description, details, state, color, until}
    revive_setting: str = ""

    @classmethod
    def from_api(cls, raw: Dict[str, Any], key: Optional[str] = None) -> "FactionMember":
        """Build a member record.

        Args:
            raw: Member record from the roster response.
            key: Mapping key when the roster arrived id-keyed; used as the id
                if the record itself does not carry one.
        """
        member_id = raw.get("id", key)
        return cls(
            id=int(member_id),
            name=str(raw.get("name", "")),
            level=int(raw.get("level") or 0),
            position=str(raw.get("position") or ""),
            days_in_faction=int(raw.get("days_in_faction") or 0),
            is_revivable=bool(raw.get("is_revivable", False)),
            is_on_wall=bool(raw.get("is_on_wall", False)),
            is_in_oc=bool(raw.get("is_in_oc", False)),
            has_early_discharge=bool(raw.get("has_early_discharge", False)),
            last_action=dict(raw.get("last_action") or {}),
            status=dict(raw.get("status") or {}),
            revive_setting=str(raw.get("revive_setting") or ""),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "position": self.position,
            "days_in_faction": self.days_in_faction,
            "is_revivable": self.is_revivable,
            "is_on_wall": self.is_on_wall,
            "is_in_oc": self.is_in_oc,
            "has_early_discharge": self.has_early_discharge,
            "last_action": dict(self.last_action),
            "status": dict(self.status),
            "revive_setting": self.revive_setting,
        }


@dataclass
class MemberStats:
    """Aggregated attack performance for one attacker.

    Former members (attackers missing from the roster) carry
    ``is_current_member=False`` and no position or tenure.
    """

    member_id: int
    name: str
    level: int
    is_current_member: bool
    position: Optional[str] = None
    days_in_faction: Optional[int] = None

    total_attacks: int = 0
    successful_attacks: int = 0
    total_respect: float = 0.0
    average_respect_per_attack: float = 0.0
    average_respect_per_success: float = 0.0
    best_single_hit: float = 0.0
    best_bonus_hit: float = 0.0
    success_rate: float = 0.0

    war_attacks: int = 0
    war_respect: float = 0.0
    chain_attacks: int = 0
    chain_respect: float = 0.0
    bonus_hits: int = 0
    stealth_attacks: int = 0
    fair_fight_efficiency: float = 1.0

    @property
    def unsuccessful_attacks(self) -> int:
        return self.total_attacks - self.successful_attacks


@dataclass
class QuickStats:
    """Faction-wide summary over a list of MemberStats."""

    total_attacks: int = 0
    total_respect: float = 0.0
    average_success_rate: float = 0.0
    top_performer: Optional[MemberStats] = None
