"""Time window utilities for FactionRespect.

Torn timestamps are epoch seconds. Relative windows (1h … 30d) are always
resolved against an explicit ``now`` so filtering and sync planning can be
evaluated at any moment and tested deterministically.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as dateutil_parser

from config.defaults import RELATIVE_WINDOWS
from factionrespect.models.dataset import TimeWindow
from factionrespect.models.filters import TimeFilter, TimePreset


def now_ts() -> int:
    """Current time in whole epoch seconds."""
    return int(time.time())


def relative_window_seconds(preset: str) -> Optional[int]:
    """Length of a named relative window, or None for ``all``/``custom``."""
    return RELATIVE_WINDOWS.get(preset)


def resolve_window(time_filter: TimeFilter, now: Optional[float] = None) -> TimeWindow:
    """Resolve a TimeFilter to concrete epoch bounds.

    Args:
        time_filter: Filter to resolve.
        now: Reference time in epoch seconds (defaults to the current time).

    Returns:
        TimeWindow. ``all`` is fully open; relative presets have an open upper bound.
    """
    if time_filter.preset == TimePreset.CUSTOM:
        return TimeWindow(from_ts=time_filter.from_ts, to_ts=time_filter.to_ts)
    if time_filter.preset == TimePreset.ALL:
        return TimeWindow()

    span = relative_window_seconds(time_filter.preset)
    reference = now_ts() if now is None else int(now)
    return TimeWindow(from_ts=reference - span)


def parse_timestamp(value: str) -> int:
    """Parse a date/time string or epoch number into epoch seconds.

    Accepts anything python-dateutil understands ("2024-01-15",
    "2024-01-15T12:00:00Z", "Jan 15 2024 12:00") as well as plain integers.
    Naive datetimes are taken as UTC, matching Torn City Time.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        parsed = dateutil_parser.parse(value)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"Unrecognised date/time: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def format_timestamp(timestamp: Optional[int]) -> str:
    """Format epoch seconds as ISO 8601 UTC, or "open" for a missing bound."""
    if timestamp is None:
        return "open"
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
