"""Member statistics export for FactionRespect.

Writes the current member-statistics view as CSV or JSON. File I/O and
format conversion only.
"""

from __future__ import annotations

import csv
import dataclasses
import io
import json
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

from factionrespect.io.persistence import ensure_dir
from factionrespect.models.members import MemberStats

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json")

CSV_HEADERS = [
    "Member",
    "Status",
    "Level",
    "Position",
    "Total Attacks",
    "Success Rate (%)",
    "Total Respect",
    "Avg/Attack",
    "War Attacks",
    "War Respect",
    "Chain Attacks",
    "Chain Respect",
    "Bonus Hits",
    "Best Hit",
    "Fair Fight Avg",
]


def _best_hit_cell(stats: MemberStats) -> str:
    # Best bonus hit is appended in parentheses when there is one
    if stats.best_bonus_hit > 0:
        return f"{stats.best_single_hit:.2f} ({stats.best_bonus_hit:g})"
    return f"{stats.best_single_hit:.2f}"


def _csv_row(stats: MemberStats) -> List[str]:
    return [
        stats.name,
        "Current" if stats.is_current_member else "Former",
        str(stats.level),
        stats.position or "",
        str(stats.total_attacks),
        f"{stats.success_rate:.1f}",
        f"{stats.total_respect:.2f}",
        f"{stats.average_respect_per_attack:.2f}",
        str(stats.war_attacks),
        f"{stats.war_respect:.2f}",
        str(stats.chain_attacks),
        f"{stats.chain_respect:.2f}",
        str(stats.bonus_hits),
        _best_hit_cell(stats),
        f"{stats.fair_fight_efficiency:.2f}",
    ]


def member_stats_to_csv(member_stats: Sequence[MemberStats]) -> str:
    """Render member statistics as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for stats in member_stats:
        writer.writerow(_csv_row(stats))
    return buffer.getvalue()


def member_stats_to_json(member_stats: Sequence[MemberStats]) -> str:
    """Render member statistics as a JSON array of objects."""
    records = []
    for stats in member_stats:
        record = dataclasses.asdict(stats)
        record["unsuccessful_attacks"] = stats.unsuccessful_attacks
        records.append(record)
    return json.dumps(records, indent=2, ensure_ascii=False)


def export_filename(fmt: str, on: Optional[date] = None) -> str:
    return f"faction-respect-{(on or date.today()).isoformat()}.{fmt}"


def export_member_stats(
    member_stats: Sequence[MemberStats],
    fmt: str,
    output_dir: str | Path,
    on: Optional[date] = None,
) -> Path:
    """Write member statistics to ``faction-respect-YYYY-MM-DD.<fmt>``.

    Args:
        member_stats: Rows to export, in display order.
        fmt: "csv" or "json".
        output_dir: Destination directory (created if missing).
        on: Date used in the file name (defaults to today).

    Returns:
        Path of the written file.

    Raises:
        ValueError: If the format is not supported.
        OSError: If the file cannot be written.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format {fmt!r}; expected one of {EXPORT_FORMATS}")

    content = member_stats_to_csv(member_stats) if fmt == "csv" else member_stats_to_json(member_stats)
    path = ensure_dir(output_dir) / export_filename(fmt, on)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)

    logger.info("Exported %d member rows to %s", len(member_stats), path)
    return path
