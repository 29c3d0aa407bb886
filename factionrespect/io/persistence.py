"""JSON persistence utilities for FactionRespect.

Provides atomic file writes (write-to-temp-then-rename) and safe JSON
load/save operations. No business logic, file I/O only.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


def save_json(data: Any, path: str | Path, indent: Optional[int] = 2) -> None:
    """Atomically write data to a JSON file.

    Uses a write-to-temp-then-rename strategy to prevent partial writes.
    Creates parent directories if they do not exist.

    Args:
        data: JSON-compatible data (dicts, lists, strings, numbers, None).
        path: Output file path.
        indent: JSON indentation level (default: 2, None for compact output).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        serialized = json.dumps(data, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        logger.error("JSON serialization failed for %s: %s", path, exc)
        raise

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp.write(serialized)
        tmp_path = tmp.name

    try:
        os.replace(tmp_path, path)
    except OSError as exc:
        os.unlink(tmp_path)
        logger.error("Atomic rename failed for %s: %s", path, exc)
        raise

    logger.debug("Saved JSON to %s (%d bytes)", path, len(serialized))


def load_json(path: str | Path) -> Optional[Any]:
    """Load and parse a JSON file.

    Returns None if the file does not exist or cannot be parsed.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed Python object, or None on error.
    """
    path = Path(path)
    if not path.exists():
        logger.debug("JSON file not found: %s", path)
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        logger.warning("Failed to load JSON from %s: %s", path, exc)
        return None


def text_fingerprint(text: str) -> str:
    """SHA-256 hex digest of a string, used to key data without storing it."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if needed and return it as a Path."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
