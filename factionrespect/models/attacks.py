"""Attack data models for FactionRespect.

Defines the raw attack record delivered by the Torn faction/attacks endpoint
and the classified form produced by the analysis layer. Raw records are
immutable; classification never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class AttackResult:
    """Closed set of attack outcomes reported by the Torn API."""

    ATTACKED = "Attacked"
    MUGGED = "Mugged"
    LOST = "Lost"
    HOSPITALIZED = "Hospitalized"
    ASSIST = "Assist"
    STALEMATE = "Stalemate"
    TIMEOUT = "Timeout"
    SPECIAL = "Special"
    INTERRUPTED = "Interrupted"
    ESCAPE = "Escape"
    ARRESTED = "Arrested"

    ALL = (
        ATTACKED,
        MUGGED,
        HOSPITALIZED,
        LOST,
        ASSIST,
        STALEMATE,
        TIMEOUT,
        SPECIAL,
        INTERRUPTED,
        ESCAPE,
        ARRESTED,
    )


class AttackType:
    """Mutually exclusive attack categories, listed in resolution priority order."""

    RETALIATION = "retaliation"
    OVERSEAS = "overseas"
    WAR = "war"
    CHAIN = "chain"
    BONUS = "bonus"
    REGULAR = "regular"

    ALL = (RETALIATION, OVERSEAS, WAR, CHAIN, BONUS, REGULAR)


@dataclass(frozen=True)
class Participant:
    """Attacker or defender as embedded in an attack record."""

    id: int
    name: str
    level: int = 0
    faction_id: Optional[int] = None
    faction_name: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Participant":
        faction = raw.get("faction") or {}
        return cls(
            id=int(raw["id"]),
            name=str(raw.get("name", "")),
            level=int(raw.get("level") or 0),
            faction_id=faction.get("id"),
            faction_name=faction.get("name"),
        )

    def to_api(self) -> Dict[str, Any]:
        faction = None
        if self.faction_id is not None:
            faction = {"id": self.faction_id, "name": self.faction_name}
        return {"id": self.id, "name": self.name, "level": self.level, "faction": faction}


@dataclass(frozen=True)
class AttackModifiers:
    """Respect multipliers applied to an attack. 1.0 means no modifier."""

    fair_fight: float = 1.0
    war: float = 1.0
    retaliation: float = 1.0
    group: float = 1.0
    overseas: float = 1.0
    chain: float = 1.0
    warlord: float = 1.0

    @classmethod
    def from_api(cls, raw: Optional[Dict[str, Any]]) -> "AttackModifiers":
        raw = raw or {}
        values = {}
        for name in ("fair_fight", "war", "retaliation", "group", "overseas", "chain", "warlord"):
            value = raw.get(name)
            values[name] = 1.0 if value is None else float(value)
        return cls(**values)

    def to_api(self) -> Dict[str, float]:
        return {
            "fair_fight": self.fair_fight,
            "war": self.war,
            "retaliation": self.retaliation,
            "group": self.group,
            "overseas": self.overseas,
            "chain": self.chain,
            "warlord": self.warlord,
        }


@dataclass(frozen=True)
class RawAttack:
    """A single attack exactly as delivered by the Torn API.

    ``attacker`` is None for stealthed or otherwise anonymised attacks; such
    records must be discarded before classification.
    """

    id: int
    code: str
    started: int
    ended: int
    attacker: Optional[Participant]
    defender: Participant
    result: str
    respect_gain: float = 0.0
    respect_loss: float = 0.0
    chain: int = 0
    is_interrupted: bool = False
    is_stealthed: bool = False
    is_raid: bool = False
    is_ranked_war: bool = False
    modifiers: AttackModifiers = field(default_factory=AttackModifiers)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "RawAttack":
        """Build a RawAttack from one element of the ``attacks`` array."""
        attacker = raw.get("attacker")
        return cls(
            id=int(raw["id"]),
            code=str(raw["code"]),
            started=int(raw["started"]),
            ended=int(raw.get("ended") or raw["started"]),
            attacker=Participant.from_api(attacker) if attacker else None,
            defender=Participant.from_api(raw.get("defender") or {"id": 0}),
            result=str(raw.get("result", "")),
            respect_gain=float(raw.get("respect_gain") or 0.0),
            respect_loss=float(raw.get("respect_loss") or 0.0),
            chain=int(raw.get("chain") or 0),
            is_interrupted=bool(raw.get("is_interrupted", False)),
            is_stealthed=bool(raw.get("is_stealthed", False)),
            is_raid=bool(raw.get("is_raid", False)),
            is_ranked_war=bool(raw.get("is_ranked_war", False)),
            modifiers=AttackModifiers.from_api(raw.get("modifiers")),
        )

    def to_api(self) -> Dict[str, Any]:
        """Serialize back to the upstream JSON shape (used for cache snapshots)."""
        return {
            "id": self.id,
            "code": self.code,
            "started": self.started,
            "ended": self.ended,
            "attacker": self.attacker.to_api() if self.attacker else None,
            "defender": self.defender.to_api(),
            "result": self.result,
            "respect_gain": self.respect_gain,
            "respect_loss": self.respect_loss,
            "chain": self.chain,
            "is_interrupted": self.is_interrupted,
            "is_stealthed": self.is_stealthed,
            "is_raid": self.is_raid,
            "is_ranked_war": self.is_ranked_war,
            "modifiers": self.modifiers.to_api(),
        }


@dataclass(frozen=True)
class ClassifiedAttack:
    """A RawAttack enriched with deterministic derived fields."""

    raw: RawAttack
    duration: int
    is_war: bool
    is_chain: bool
    is_bonus_hit: bool
    attack_type: str

    # Raw fields are read through so callers can treat this as an attack record.
    @property
    def id(self) -> int:
        return self.raw.id

    @property
    def code(self) -> str:
        return self.raw.code

    @property
    def started(self) -> int:
        return self.raw.started

    @property
    def ended(self) -> int:
        return self.raw.ended

    @property
    def attacker(self) -> Participant:
        # Classification guarantees a non-null attacker
        return self.raw.attacker  # type: ignore[return-value]

    @property
    def defender(self) -> Participant:
        return self.raw.defender

    @property
    def result(self) -> str:
        return self.raw.result

    @property
    def respect_gain(self) -> float:
        return self.raw.respect_gain

    @property
    def chain(self) -> int:
        return self.raw.chain

    @property
    def is_stealthed(self) -> bool:
        return self.raw.is_stealthed

    @property
    def modifiers(self) -> AttackModifiers:
        return self.raw.modifiers
