"""FactionRespect: SyncConfig and environment-based configuration loading.

All runtime configuration flows through SyncConfig. No module-level globals,
no hard-coded values. The API key comes exclusively from the environment or
an explicit argument.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from config.defaults import (
    BATCH_LIMIT,
    CACHE_DIR,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TIME_PRESET,
    EXPORT_DIR,
    MAX_BATCHES,
    RATE_LIMIT_DELAY_SECONDS,
    REQUEST_TIMEOUT,
    SMALL_BATCH_SIZE,
    SMALL_BATCH_STREAK,
    STALE_TOLERANCE_SECONDS,
    TORN_BASE_URL,
    YIELD_EVERY_BATCHES,
    YIELD_SECONDS,
)

# Load .env file if present; silently skip if missing
load_dotenv()


@dataclass
class SyncConfig:
    """Single configuration object shared by the client, cache and sync service.

    All tuneable thresholds, the API key and file paths live here.
    Never use module-level globals or hard-coded values in sync code.
    """

    # ── Credential (from environment only) ─────────────────────────────────────
    api_key: Optional[str] = field(default_factory=lambda: os.getenv("TORN_API_KEY"))

    # ── Torn API ──────────────────────────────────────────────────────────────
    base_url: str = TORN_BASE_URL
    request_timeout: int = REQUEST_TIMEOUT
    rate_limit_delay_seconds: float = RATE_LIMIT_DELAY_SECONDS

    # ── Pagination ────────────────────────────────────────────────────────────
    batch_limit: int = BATCH_LIMIT
    max_batches: int = MAX_BATCHES
    small_batch_size: int = SMALL_BATCH_SIZE
    small_batch_streak: int = SMALL_BATCH_STREAK
    yield_every_batches: int = YIELD_EVERY_BATCHES
    yield_seconds: float = YIELD_SECONDS

    # ── Sync window ───────────────────────────────────────────────────────────
    default_time_preset: str = DEFAULT_TIME_PRESET
    stale_tolerance_seconds: int = STALE_TOLERANCE_SECONDS

    # ── Output and logging ────────────────────────────────────────────────────
    cache_dir: str = field(default_factory=lambda: os.getenv("FACTION_CACHE_DIR", CACHE_DIR))
    export_dir: str = field(default_factory=lambda: os.getenv("FACTION_EXPORT_DIR", EXPORT_DIR))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL))

    def __post_init__(self) -> None:
        if self.api_key is not None:
            self.api_key = self.api_key.strip() or None
        if self.rate_limit_delay_seconds < 0:
            raise ValueError(
                f"rate_limit_delay_seconds must be >= 0, got {self.rate_limit_delay_seconds}"
            )
        if self.batch_limit < 1:
            raise ValueError(f"batch_limit must be >= 1, got {self.batch_limit}")
        if self.max_batches < 1:
            raise ValueError(f"max_batches must be >= 1, got {self.max_batches}")
        if self.small_batch_streak < 1:
            raise ValueError(f"small_batch_streak must be >= 1, got {self.small_batch_streak}")
        if self.yield_every_batches < 1:
            raise ValueError(
                f"yield_every_batches must be >= 1, got {self.yield_every_batches}"
            )

    def require_api_key(self) -> str:
        """Return the configured API key or fail fast before any request is made."""
        if not self.api_key:
            from factionrespect.errors import ConfigurationError

            raise ConfigurationError("A Torn API key is required (set TORN_API_KEY)")
        return self.api_key
