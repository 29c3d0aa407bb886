"""FactionRespect: all default threshold values and configuration constants.

All tuneable values live here. Never hard-code magic numbers in source files.
Import constants from this module; override via SyncConfig at runtime.
"""

# ── Torn API ───────────────────────────────────────────────────────────────────
# Torn API v2 base URL
TORN_BASE_URL: str = "https://api.torn.com/v2"

# Roster endpoint (id-keyed mapping or array of member records)
MEMBERS_ENDPOINT: str = "faction/members"

# Paginated outgoing-attacks endpoint
ATTACKS_ENDPOINT: str = "faction/attacks"

# HTTP request timeout for Torn calls (seconds)
REQUEST_TIMEOUT: int = 30

# ── Rate limiting ──────────────────────────────────────────────────────────────
# Minimum seconds between the end of one request and the start of the next
RATE_LIMIT_DELAY_SECONDS: float = 0.6

# ── Attack pagination ──────────────────────────────────────────────────────────
# Attacks requested per batch (Torn hard limit for faction/attacks: 1000)
BATCH_LIMIT: int = 500

# Runaway guard: maximum batches followed in a single paginated fetch
MAX_BATCHES: int = 1000

# A batch with at most this many attacks counts as "small"
SMALL_BATCH_SIZE: int = 5

# Consecutive small batches after which the end of data is assumed
SMALL_BATCH_STREAK: int = 3

# Unbounded fetches yield to the event loop every N batches
YIELD_EVERY_BATCHES: int = 10

# Length of that yield (seconds)
YIELD_SECONDS: float = 0.01

# ── Attack classification ──────────────────────────────────────────────────────
# Chain counter above which an attack counts as a chain attack
CHAIN_THRESHOLD: int = 9

# Respect values paid out for chain milestone bonus hits (10 × 2^k)
BONUS_HIT_VALUES: frozenset = frozenset(10 * 2 ** k for k in range(13))

# Results that count as a successful attack
SUCCESSFUL_RESULTS: frozenset = frozenset({"Attacked", "Mugged", "Hospitalized"})

# ── Time windows ───────────────────────────────────────────────────────────────
# Named relative windows, measured back from "now" (seconds)
RELATIVE_WINDOWS: dict = {
    "1h": 3600,
    "6h": 21600,
    "24h": 86400,
    "7d": 604800,
    "30d": 2592000,
}

# Default window preset for a fresh filter state
DEFAULT_TIME_PRESET: str = "24h"

# ── Incremental sync ───────────────────────────────────────────────────────────
# A cache whose newest attack is younger than this is considered current
STALE_TOLERANCE_SECONDS: int = 300

# ── Output paths ──────────────────────────────────────────────────────────────
# Directory holding the credential-partitioned dataset cache
CACHE_DIR: str = ".cache/factionrespect"

# Directory receiving CSV/JSON exports
EXPORT_DIR: str = "exports"

# ── Logging ────────────────────────────────────────────────────────────────────
DEFAULT_LOG_LEVEL: str = "INFO"
