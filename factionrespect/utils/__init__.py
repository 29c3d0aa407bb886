"""FactionRespect utilities package.

Time window helpers and logging setup. No network calls.
"""

from factionrespect.utils.time_windows import (
    format_timestamp,
    now_ts,
    parse_timestamp,
    relative_window_seconds,
    resolve_window,
)

__all__ = [
    "format_timestamp",
    "now_ts",
    "parse_timestamp",
    "relative_window_seconds",
    "resolve_window",
]
