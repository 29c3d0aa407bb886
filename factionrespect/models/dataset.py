"""Dataset, pagination and sync-window models for FactionRespect.

Defines FactionDataset (the top-level aggregate replaced on every sync), the
pagination types produced by the Torn client, and the time-window types used
by the incremental sync planner.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set
from urllib.parse import parse_qsl, urlparse

from factionrespect.models.attacks import ClassifiedAttack, RawAttack
from factionrespect.models.members import FactionMember, MemberStats


class FetchTermination:
    """Reasons a paginated attack fetch stopped."""

    EMPTY_BATCH = "EMPTY_BATCH"
    REPEATED_CURSOR = "REPEATED_CURSOR"        # anomalous: server returned a non-advancing page
    SMALL_BATCH_STREAK = "SMALL_BATCH_STREAK"  # heuristic end of data
    END_OF_DATA = "END_OF_DATA"                # no continuation cursor
    REACHED_UPPER_BOUND = "REACHED_UPPER_BOUND"

    ANOMALOUS = frozenset({REPEATED_CURSOR, SMALL_BATCH_STREAK})


@dataclass(frozen=True)
class PageCursor:
    """Opaque continuation token issued by the upstream API.

    Torn hands out the next page as a full URL. The fetch loop only needs the
    query parameters embedded in it, so the URL is parsed once here and the
    rest of the code deals in parameter dicts.
    """

    token: str

    @property
    def params(self) -> Dict[str, str]:
        """Query parameters carried by the token, minus any credential."""
        query = urlparse(self.token).query
        return {k: v for k, v in parse_qsl(query, keep_blank_values=True) if k != "key"}

    @classmethod
    def from_link(cls, link: Optional[str]) -> Optional["PageCursor"]:
        if not link:
            return None
        return cls(token=link)


@dataclass
class AttackBatch:
    """One page of the attacks feed."""

    attacks: List[RawAttack]
    next_cursor: Optional[PageCursor] = None
    total_hint: Optional[int] = None


@dataclass
class AttackFetchResult:
    """Outcome of a complete paginated fetch."""

    attacks: List[RawAttack] = field(default_factory=list)
    roster: List[FactionMember] = field(default_factory=list)
    batches: int = 0
    termination: str = FetchTermination.END_OF_DATA
    total_hint: Optional[int] = None
    has_more_data: bool = False

    @property
    def anomalous(self) -> bool:
        return self.termination in FetchTermination.ANOMALOUS


@dataclass
class FactionDataset:
    """Classified attacks, current roster and computed member statistics.

    Attacks are in fetch order after a full sync and in ``started``
    descending order after an incremental merge; callers re-sort as needed.
    """

    attacks: List[ClassifiedAttack] = field(default_factory=list)
    roster: List[FactionMember] = field(default_factory=list)
    member_stats: List[MemberStats] = field(default_factory=list)

    @property
    def attack_codes(self) -> Set[str]:
        return {attack.code for attack in self.attacks}

    @property
    def raw_attacks(self) -> List[RawAttack]:
        return [attack.raw for attack in self.attacks]


@dataclass(frozen=True)
class TimeWindow:
    """Resolved [from_ts, to_ts] bounds in epoch seconds; None means open."""

    from_ts: Optional[int] = None
    to_ts: Optional[int] = None

    @property
    def unbounded(self) -> bool:
        return self.from_ts is None and self.to_ts is None

    def contains(self, timestamp: int) -> bool:
        if self.from_ts is not None and timestamp < self.from_ts:
            return False
        if self.to_ts is not None and timestamp > self.to_ts:
            return False
        return True


@dataclass(frozen=True)
class FetchRange:
    """A sub-fetch requested by the incremental sync planner."""

    from_ts: Optional[int]
    to_ts: Optional[int]
    direction: str   # "older" or "newer"


class SyncMode:
    """Kinds of sync run by FactionSync."""

    FULL = "full"
    INCREMENTAL = "incremental"


@dataclass
class SyncReport:
    """Timing and outcome record for one full or incremental sync."""

    sync_id: str
    mode: str                     # SyncMode value
    window: TimeWindow
    start_time: datetime
    end_time: Optional[datetime] = None
    ranges: List[FetchRange] = field(default_factory=list)
    terminations: List[str] = field(default_factory=list)
    fetched_attacks: int = 0
    total_attacks: int = 0
    cached: bool = False

    @property
    def elapsed_seconds(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
