#!/usr/bin/env python3
"""FactionRespect: pre-flight environment validation.

Checks:
  1. Python version compatibility (3.10+)
  2. Required package imports
  3. FactionRespect module imports
  4. Environment variables (TORN_API_KEY, cache/export locations)
  5. Cache and export directories are writable
  6. Torn API key can read the faction roster

Usage:
    python scripts/validate_env.py
    python scripts/validate_env.py --skip-network
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import sys
from pathlib import Path
from typing import List, Optional, Tuple

# Ensure project root is on sys.path
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

CheckResult = Tuple[Optional[bool], str]   # None = warning only

# ── ANSI colours ────────────────────────────────────────────────────────────────
_GREEN = "\033[32m"
_RED = "\033[31m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"
_BOLD = "\033[1m"


def _ok(msg: str) -> str:
    return f"{_GREEN}✓{_RESET}  {msg}"


def _fail(msg: str) -> str:
    return f"{_RED}✗{_RESET}  {msg}"


def _warn(msg: str) -> str:
    return f"{_YELLOW}⚠{_RESET}  {msg}"


def _header(msg: str) -> str:
    return f"\n{_BOLD}{msg}{_RESET}"


def _mask(secret: str) -> str:
    return secret[:4] + "..." + secret[-2:] if len(secret) > 8 else "***"


# ── Check functions ──────────────────────────────────────────────────────────────

def check_python_version() -> CheckResult:
    """Verify Python version is 3.10 or newer."""
    major, minor = sys.version_info[:2]
    version_str = f"{major}.{minor}.{sys.version_info.micro}"
    if (major, minor) < (3, 10):
        return False, f"Python {version_str} detected, requires >= 3.10"
    return True, f"Python {version_str}"


def check_package_imports() -> List[CheckResult]:
    """Verify all required packages can be imported."""
    required = [
        ("requests", "requests"),
        ("dotenv", "python-dotenv"),
        ("dateutil", "python-dateutil"),
        ("yaml", "PyYAML"),
    ]
    results: List[CheckResult] = []
    for import_name, package_name in required:
        try:
            mod = importlib.import_module(import_name)
            version = getattr(mod, "__version__", "?")
            results.append((True, f"{package_name} ({version})"))
        except ImportError:
            results.append((False, f"{package_name} NOT installed (pip install {package_name})"))
    return results


def check_factionrespect_imports() -> List[CheckResult]:
    """Verify the factionrespect package modules can be imported."""
    modules = [
        "config.defaults",
        "config.settings",
        "factionrespect.models.attacks",
        "factionrespect.models.dataset",
        "factionrespect.models.filters",
        "factionrespect.analysis.aggregator",
        "factionrespect.analysis.filter_engine",
        "factionrespect.analysis.sync_planner",
        "factionrespect.clients.torn_client",
        "factionrespect.io.cache",
        "factionrespect.io.exporters",
        "factionrespect.sync",
    ]
    results: List[CheckResult] = []
    for module in modules:
        try:
            importlib.import_module(module)
            results.append((True, module))
        except ImportError as exc:
            results.append((False, f"{module}: {exc}"))
    return results


def check_env_vars(config) -> List[CheckResult]:
    """Report the settings resolved from the environment and .env."""
    results: List[CheckResult] = []
    if config.api_key:
        results.append((True, f"TORN_API_KEY = {_mask(config.api_key)}"))
    else:
        results.append((None, "TORN_API_KEY not set (pass --api-key to the sync script instead)"))
    results.append((True, f"FACTION_CACHE_DIR = {config.cache_dir!r}"))
    results.append((True, f"FACTION_EXPORT_DIR = {config.export_dir!r}"))
    results.append((True, f"LOG_LEVEL = {config.log_level!r}"))
    return results


def check_writable(label: str, directory: str) -> CheckResult:
    """Verify a directory can be created and written to."""
    path = Path(directory)
    if not path.is_absolute():
        path = _ROOT / path
    try:
        path.mkdir(parents=True, exist_ok=True)
        marker = path / ".write_test"
        marker.write_text("ok")
        marker.unlink()
        return True, f"{label} directory writable: {path}"
    except OSError as exc:
        return False, f"{label} directory not writable ({path}): {exc}"


def check_torn_connectivity(config) -> CheckResult:
    """Fetch the faction roster with the configured key."""
    from factionrespect.clients.torn_client import TornClient
    from factionrespect.errors import ConfigurationError

    try:
        client = TornClient.from_config(config)
    except ConfigurationError as exc:
        return None, f"Skipped: {exc}"

    with client:
        if asyncio.run(client.test_connection()):
            return True, "Torn API reachable, key can read faction members"
    return False, "Torn API rejected the request (see log output above)"


# ── Report ───────────────────────────────────────────────────────────────────────

def _print_results(results: List[CheckResult], indent: int = 2) -> int:
    """Print check results and return count of failures."""
    failures = 0
    pad = " " * indent
    for ok, msg in results:
        if ok is True:
            print(f"{pad}{_ok(msg)}")
        elif ok is False:
            print(f"{pad}{_fail(msg)}")
            failures += 1
        else:
            print(f"{pad}{_warn(msg)}")
    return failures


def main() -> None:
    """Run all pre-flight checks and report results."""
    parser = argparse.ArgumentParser(
        description="FactionRespect: pre-flight environment validation",
    )
    parser.add_argument(
        "--skip-network",
        action="store_true",
        default=False,
        help="Skip the Torn API connectivity check",
    )
    args = parser.parse_args()

    total_failures = 0

    print(_header("1. Python Version"))
    total_failures += _print_results([check_python_version()])

    print(_header("2. Required Package Imports"))
    total_failures += _print_results(check_package_imports())

    print(_header("3. FactionRespect Module Imports"))
    module_failures = _print_results(check_factionrespect_imports())
    total_failures += module_failures
    if module_failures:
        print(f"\n{_RED}{_BOLD}Cannot continue without the package modules.{_RESET}")
        sys.exit(1)

    from config.settings import SyncConfig
    from factionrespect.utils.logging_utils import configure_logging

    config = SyncConfig()
    configure_logging(log_level="WARNING")

    print(_header("4. Environment Variables"))
    _print_results(check_env_vars(config))   # missing key is a warning only

    print(_header("5. Output Directories"))
    total_failures += _print_results([
        check_writable("Cache", config.cache_dir),
        check_writable("Export", config.export_dir),
    ])

    print(_header("6. Network Connectivity"))
    if args.skip_network:
        print(f"  {_warn('Skipped (--skip-network)')}")
    else:
        total_failures += _print_results([check_torn_connectivity(config)])

    print(f"\n{'═' * 54}")
    if total_failures == 0:
        print(f"{_GREEN}{_BOLD}All required checks passed.{_RESET} Environment is ready.")
        sys.exit(0)
    print(
        f"{_RED}{_BOLD}{total_failures} check(s) failed.{_RESET} "
        "Resolve the errors above before syncing."
    )
    sys.exit(1)


if __name__ == "__main__":
    main()
