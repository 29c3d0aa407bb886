"""Filter state models for FactionRespect.

A FilterState combines three independent predicate groups (time, attack,
member). The engine that evaluates them lives in
factionrespect.analysis.filter_engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from config.defaults import DEFAULT_TIME_PRESET, RELATIVE_WINDOWS
from factionrespect.models.attacks import AttackResult, AttackType


class TimePreset:
    """Accepted values for TimeFilter.preset."""

    CUSTOM = "custom"
    ALL = "all"
    RELATIVE = tuple(RELATIVE_WINDOWS)   # 1h, 6h, 24h, 7d, 30d

    CHOICES = RELATIVE + (ALL, CUSTOM)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@dataclass(frozen=True)
class TimeFilter:
    """Named relative window, "all", or an explicit custom range.

    ``from_ts`` / ``to_ts`` are epoch seconds and only apply to the custom
    preset; either bound may be left open.
    """

    preset: str = DEFAULT_TIME_PRESET
    from_ts: Optional[int] = None
    to_ts: Optional[int] = None

    def __post_init__(self) -> None:
        if self.preset not in TimePreset.CHOICES:
            raise ValueError(
                f"Unknown time preset {self.preset!r}; expected one of {TimePreset.CHOICES}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {"preset": self.preset, "from_ts": self.from_ts, "to_ts": self.to_ts}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "TimeFilter":
        """Rebuild a saved filter.

        Raises:
            ValueError: On an unknown preset or a non-integer bound.
            TypeError: If a bound is neither a number nor a string.
        """
        return cls(
            preset=raw.get("preset") or DEFAULT_TIME_PRESET,
            from_ts=_optional_int(raw.get("from_ts")),
            to_ts=_optional_int(raw.get("to_ts")),
        )


@dataclass(frozen=True)
class AttackFilter:
    """Attack-level predicates.

    Tri-state booleans: None means "don't care", True/False require the
    corresponding modifier to be (or not be) greater than 1.
    """

    attack_types: frozenset = frozenset(AttackType.ALL)
    results: frozenset = frozenset(AttackResult.ALL)
    min_fair_fight: Optional[float] = None
    max_fair_fight: Optional[float] = None
    has_war_bonus: Optional[bool] = None
    has_overseas_bonus: Optional[bool] = None
    has_retaliation_bonus: Optional[bool] = None
    min_chain: Optional[int] = None
    max_chain: Optional[int] = None
    include_bonus_hits: bool = True


@dataclass(frozen=True)
class MemberFilter:
    """Attacker-level predicates.

    The current/former toggles need a roster to be meaningful; without one
    they are ignored.
    """

    selected_members: frozenset = frozenset()
    current_members_only: bool = False
    former_members_only: bool = False
    search_query: str = ""


@dataclass(frozen=True)
class FilterState:
    """Complete filter selection applied to a dataset."""

    time: TimeFilter = field(default_factory=TimeFilter)
    attacks: AttackFilter = field(default_factory=AttackFilter)
    members: MemberFilter = field(default_factory=MemberFilter)


def default_filter_state(time_filter: Optional[TimeFilter] = None) -> FilterState:
    """Fresh filter selection: every attack type and result, bonus hits included."""
    return FilterState(time=time_filter or TimeFilter())


def permissive_filter_state() -> FilterState:
    """Filter selection that lets every classified attack through."""
    return FilterState(time=TimeFilter(preset=TimePreset.ALL))