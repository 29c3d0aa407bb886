"""FactionRespect configuration package."""

from config.defaults import (
    BATCH_LIMIT,
    BONUS_HIT_VALUES,
    MAX_BATCHES,
    RATE_LIMIT_DELAY_SECONDS,
    RELATIVE_WINDOWS,
    STALE_TOLERANCE_SECONDS,
    SUCCESSFUL_RESULTS,
    TORN_BASE_URL,
)
from config.settings import SyncConfig

__all__ = [
    "SyncConfig",
    "BATCH_LIMIT",
    "BONUS_HIT_VALUES",
    "MAX_BATCHES",
    "RATE_LIMIT_DELAY_SECONDS",
    "RELATIVE_WINDOWS",
    "STALE_TOLERANCE_SECONDS",
    "SUCCESSFUL_RESULTS",
    "TORN_BASE_URL",
]
