"""FactionRespect data models package.

Every sync input and output is a typed dataclass.
Never pass raw API dicts beyond the client layer; always use the typed models.
"""

from factionrespect.models.attacks import (
    AttackModifiers,
    AttackResult,
    AttackType,
    ClassifiedAttack,
    Participant,
    RawAttack,
)
from factionrespect.models.dataset import (
    AttackBatch,
    AttackFetchResult,
    FactionDataset,
    FetchRange,
    FetchTermination,
    PageCursor,
    SyncMode,
    SyncReport,
    TimeWindow,
)
from factionrespect.models.filters import (
    AttackFilter,
    FilterState,
    MemberFilter,
    TimeFilter,
    TimePreset,
    default_filter_state,
    permissive_filter_state,
)
from factionrespect.models.members import FactionMember, MemberStats, QuickStats

__all__ = [
    # attacks
    "AttackModifiers",
    "AttackResult",
    "AttackType",
    "ClassifiedAttack",
    "Participant",
    "RawAttack",
    # members
    "FactionMember",
    "MemberStats",
    "QuickStats",
    # dataset
    "AttackBatch",
    "AttackFetchResult",
    "FactionDataset",
    "FetchRange",
    "FetchTermination",
    "PageCursor",
    "SyncMode",
    "SyncReport",
    "TimeWindow",
    # filters
    "AttackFilter",
    "FilterState",
    "MemberFilter",
    "TimeFilter",
    "TimePreset",
    "default_filter_state",
    "permissive_filter_state",
]
