#!/usr/bin/env python3
"""FactionRespect CLI: sync a faction's outgoing attacks and report respect per member.

Usage:
    python scripts/sync_faction.py --window 7d
    python scripts/sync_faction.py --from 2024-01-01 --to 2024-01-31 --export csv
    python scripts/sync_faction.py --window 24h --incremental --top 20
    python scripts/sync_faction.py --clear-cache
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

# Ensure project root is on sys.path for consistent import resolution
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.defaults import (  # noqa: E402
    CACHE_DIR,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TIME_PRESET,
    EXPORT_DIR,
)
from config.settings import SyncConfig  # noqa: E402
from factionrespect.analysis.aggregator import compute_quick_stats  # noqa: E402
from factionrespect.errors import FactionRespectError  # noqa: E402
from factionrespect.io.exporters import EXPORT_FORMATS  # noqa: E402
from factionrespect.models.filters import TimeFilter, TimePreset  # noqa: E402
from factionrespect.sync import FactionSync  # noqa: E402
from factionrespect.utils.logging_utils import configure_logging, get_logger  # noqa: E402
from factionrespect.utils.time_windows import parse_timestamp  # noqa: E402

logger = get_logger("cli.sync_faction")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argparse argument parser."""
    parser = argparse.ArgumentParser(
        prog="sync_faction",
        description="FactionRespect: Torn faction attack log analysis",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Credentials ─────────────────────────────────────────────────────────────
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Torn API key (defaults to TORN_API_KEY from the environment or .env)",
    )

    # ── Window ──────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--window",
        type=str,
        default=None,
        choices=list(TimePreset.RELATIVE) + [TimePreset.ALL],
        help=f"Relative analysis window (default: saved choice, else {DEFAULT_TIME_PRESET})",
    )
    parser.add_argument(
        "--from",
        dest="from_date",
        type=str,
        default=None,
        help="Custom window start (any date/time, or epoch seconds); overrides --window",
    )
    parser.add_argument(
        "--to",
        dest="to_date",
        type=str,
        default=None,
        help="Custom window end (any date/time, or epoch seconds); overrides --window",
    )

    # ── Sync mode ───────────────────────────────────────────────────────────────
    parser.add_argument(
        "--incremental",
        action="store_true",
        default=False,
        help="Only fetch what the cached dataset lacks for the window",
    )
    parser.add_argument(
        "--cache-dir",
        type=str,
        default=CACHE_DIR,
        help="Directory holding the dataset cache",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        default=False,
        help="Drop the cached dataset for this api key and exit",
    )

    # ── Output ──────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--export",
        type=str,
        default=None,
        choices=list(EXPORT_FORMATS),
        help="Export the member statistics in this format",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=EXPORT_DIR,
        help="Directory for exported files",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of members to print in the summary",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity level",
    )

    return parser


def args_to_config(args: argparse.Namespace) -> SyncConfig:
    """Convert parsed CLI arguments to a SyncConfig instance."""
    config = SyncConfig(
        cache_dir=args.cache_dir,
        export_dir=args.output_dir,
        log_level=args.log_level,
    )
    if args.api_key:
        config.api_key = args.api_key.strip() or None
    return config


def args_to_time_filter(args: argparse.Namespace) -> Optional[TimeFilter]:
    """Build the requested TimeFilter, or None to keep the saved choice.

    Raises:
        ValueError: If --from/--to cannot be parsed or are out of order.
    """
    if args.from_date or args.to_date:
        from_ts = parse_timestamp(args.from_date) if args.from_date else None
        to_ts = parse_timestamp(args.to_date) if args.to_date else None
        if from_ts is not None and to_ts is not None and from_ts > to_ts:
            raise ValueError("--from must not be later than --to")
        return TimeFilter(preset=TimePreset.CUSTOM, from_ts=from_ts, to_ts=to_ts)
    if args.window:
        return TimeFilter(preset=args.window)
    return None


def _print_progress(count: int, total: Optional[int]) -> None:
    suffix = f"/{total}" if total is not None else ""
    print(f"\r  fetched {count}{suffix} attacks", end="", file=sys.stderr, flush=True)


def print_summary(sync: FactionSync, top: int) -> None:
    """Print faction totals and the top members of the filtered view."""
    stats = list(sync.state.filtered_stats)
    quick = compute_quick_stats(stats)
    print()
    print(f"Attacks: {quick.total_attacks}   Respect: {quick.total_respect:.2f}   "
          f"Avg success rate: {quick.average_success_rate:.1f}%")
    if quick.top_performer is not None:
        print(f"Top performer: {quick.top_performer.name} ({quick.top_performer.total_respect:.2f})")
    print()
    print(f"{'Member':<20} {'Status':<8} {'Attacks':>8} {'Success%':>9} {'Respect':>10} {'Best':>8}")
    for row in stats[:top]:
        print(
            f"{row.name[:20]:<20} {'Current' if row.is_current_member else 'Former':<8} "
            f"{row.total_attacks:>8} {row.success_rate:>9.1f} {row.total_respect:>10.2f} "
            f"{row.best_single_hit:>8.2f}"
        )


async def run(args: argparse.Namespace) -> int:
    """Run one sync as described by the CLI flags; returns the exit code."""
    config = args_to_config(args)
    try:
        time_filter = args_to_time_filter(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    sync = FactionSync(config)
    try:
        if args.clear_cache:
            sync.clear_cache()
            logger.info("Cache cleared")
            return 0

        sync.restore_cached()
        if args.incremental:
            report = await sync.incremental_sync(time_filter, on_progress=_print_progress)
        else:
            report = await sync.full_sync(time_filter, on_progress=_print_progress)
        print(file=sys.stderr)

        logger.info(
            "Sync %s finished in %.1fs (%d fetched, %d total)",
            report.sync_id, report.elapsed_seconds, report.fetched_attacks, report.total_attacks,
        )
        print_summary(sync, args.top)

        if args.export:
            path = sync.export(args.export, args.output_dir)
            if path is not None:
                print(f"\nExported to {path}")
        return 0
    except FactionRespectError as exc:
        logger.error("Sync failed: %s", exc)
        return 1
    except OSError as exc:
        logger.error("Could not write output: %s", exc)
        return 1
    finally:
        sync.close()


def main() -> None:
    """CLI entrypoint: parse arguments, configure logging, run the sync."""
    args = build_arg_parser().parse_args()
    configure_logging(log_level=args.log_level)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        logger.info("Sync interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
