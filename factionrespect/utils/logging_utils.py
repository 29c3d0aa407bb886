"""Logging utilities for FactionRespect.

Provides structured logging with sync_id context injection and YAML-based
configuration loading. All loggers are namespaced under 'factionrespect'.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, MutableMapping, Optional

import yaml


def configure_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Configure logging from the YAML configuration file.

    Falls back to basicConfig if the YAML file is not found.

    Args:
        config_path: Path to logging.yaml (defaults to config/logging.yaml).
        log_level: Override log level (e.g., "DEBUG", "INFO", "WARNING").
        log_file: Override the log file path.
    """
    if config_path is None:
        config_path = str(Path(__file__).parent.parent.parent / "config" / "logging.yaml")

    if not os.path.exists(config_path):
        logging.basicConfig(
            level=getattr(logging, (log_level or "INFO").upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        return

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if log_file and "handlers" in cfg:
        for handler_cfg in cfg["handlers"].values():
            if handler_cfg.get("class") == "logging.FileHandler":
                handler_cfg["filename"] = log_file

    # Third-party loggers (urllib3) keep their configured level
    if log_level and "loggers" in cfg:
        level = log_level.upper()
        for name, logger_cfg in cfg["loggers"].items():
            if name.startswith("factionrespect"):
                logger_cfg["level"] = level
        if "root" in cfg:
            cfg["root"]["level"] = level

    logging.config.dictConfig(cfg)


def get_logger(name: str) -> logging.Logger:
    """Get a namespaced logger under 'factionrespect'.

    Args:
        name: Module or component name (e.g., "clients.torn_client").

    Returns:
        Logger instance with full 'factionrespect.<name>' namespace.
    """
    if name.startswith("factionrespect"):
        return logging.getLogger(name)
    return logging.getLogger(f"factionrespect.{name}")


class SyncContextAdapter(logging.LoggerAdapter):
    """Logger adapter that injects sync_id into all log records.

    Usage:
        logger = get_sync_logger("sync", sync_id="20240115_120000_incremental")
        logger.info("Fetching newer attacks")
        # Output: [INFO] factionrespect.sync: [20240115_120000_incremental] Fetching newer attacks
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        sync_id = self.extra.get("sync_id", "unknown")
        return f"[{sync_id}] {msg}", kwargs


def get_sync_logger(name: str, sync_id: str) -> SyncContextAdapter:
    """Get a sync-context-aware logger adapter.

    Args:
        name: Module or component name.
        sync_id: Sync identifier (YYYYMMDD_HHMMSS_<mode>).

    Returns:
        LoggerAdapter that prefixes all messages with [sync_id].
    """
    return SyncContextAdapter(get_logger(name), {"sync_id": sync_id})
