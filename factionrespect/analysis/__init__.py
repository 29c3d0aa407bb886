"""FactionRespect analysis package.

Pure analytical functions only: no I/O, no API calls, no side effects.
All functions operate on typed models from factionrespect.models.
"""

from factionrespect.analysis.aggregator import (
    aggregate_member_stats,
    compute_quick_stats,
    process_attacks,
)
from factionrespect.analysis.classifier import (
    classify_attack,
    classify_attacks,
    discard_attackerless,
    is_bonus_hit_value,
)
from factionrespect.analysis.filter_engine import filter_attacks
from factionrespect.analysis.sync_planner import (
    cached_span,
    merge_attacks,
    plan_incremental_fetch,
    resolve_window,
)

__all__ = [
    "aggregate_member_stats",
    "compute_quick_stats",
    "process_attacks",
    "classify_attack",
    "classify_attacks",
    "discard_attackerless",
    "is_bonus_hit_value",
    "filter_attacks",
    "cached_span",
    "merge_attacks",
    "plan_incremental_fetch",
    "resolve_window",
]
