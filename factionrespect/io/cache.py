"""Persistent dataset cache for FactionRespect.

JsonFileStore is an opaque key/value store backed by one JSON file per key.
DatasetCache layers the dataset snapshot on top of it: raw attacks, roster
and last-sync time, partitioned by a fingerprint of the api key so datasets
fetched under different credentials never mix. The key itself is never
written to disk.

Read failures of any kind are reported as a cache miss.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from dateutil import parser as dateutil_parser

from factionrespect.analysis.aggregator import process_attacks
from factionrespect.io.persistence import load_json, save_json, text_fingerprint
from factionrespect.models.attacks import RawAttack
from factionrespect.models.dataset import FactionDataset
from factionrespect.models.filters import TimeFilter
from factionrespect.models.members import FactionMember

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")

DATASET_KEY_PREFIX = "dataset-"
TIME_FILTER_KEY = "time-filter"


class JsonFileStore:
    """Get/set/remove/clear over a directory of ``<key>.json`` files.

    Args:
        root: Directory holding the entries. Created lazily on first write.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[Any]:
        return load_json(self._path(key))

    def set(self, key: str, value: Any) -> None:
        # Compact output: attack snapshots get large
        save_json(value, self._path(key), indent=None)

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass

    def clear(self, prefix: str = "") -> int:
        """Remove every entry whose key starts with ``prefix``.

        Returns:
            Number of entries removed.
        """
        if not self.root.is_dir():
            return 0
        removed = 0
        for path in self.root.glob(f"{_UNSAFE_KEY_CHARS.sub('_', prefix)}*.json"):
            path.unlink()
            removed += 1
        return removed


@dataclass
class CachedDataset:
    """A dataset restored from the cache, with the time it was synced."""

    dataset: FactionDataset
    last_sync: datetime


def api_key_fingerprint(api_key: str) -> str:
    return text_fingerprint(api_key)


class DatasetCache:
    """Credential-partitioned snapshot of the last synced dataset.

    Args:
        store: Backing key/value store.
    """

    def __init__(self, store: JsonFileStore) -> None:
        self.store = store

    @classmethod
    def at(cls, cache_dir: str | Path) -> "DatasetCache":
        return cls(JsonFileStore(cache_dir))

    @staticmethod
    def _dataset_key(fingerprint: str) -> str:
        return f"{DATASET_KEY_PREFIX}{fingerprint[:16]}"

    def get(self, api_key: str) -> Optional[CachedDataset]:
        """Restore the dataset cached for ``api_key``.

        Attacks are reclassified and member statistics recomputed on load.

        Returns:
            CachedDataset, or None on a miss, a credential mismatch or a
            malformed entry.
        """
        fingerprint = api_key_fingerprint(api_key)
        payload = self.store.get(self._dataset_key(fingerprint))
        if payload is None:
            return None

        try:
            if payload["fingerprint"] != fingerprint:
                logger.info("Cached dataset belongs to a different api key, ignoring it")
                return None
            raws = [RawAttack.from_api(item) for item in payload["attacks"]]
            roster = [FactionMember.from_api(item) for item in payload["roster"]]
            last_sync = dateutil_parser.isoparse(payload["last_sync"])
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Discarding malformed cache entry: %s", exc)
            return None

        attacks, member_stats = process_attacks(raws, roster)
        logger.info(
            "Restored %d cached attacks (%d members) synced at %s",
            len(attacks), len(member_stats), last_sync.isoformat(),
        )
        return CachedDataset(
            dataset=FactionDataset(attacks=attacks, roster=roster, member_stats=member_stats),
            last_sync=last_sync,
        )

    def has(self, api_key: str) -> bool:
        """True when an entry written under ``api_key`` exists (contents not validated)."""
        fingerprint = api_key_fingerprint(api_key)
        payload = self.store.get(self._dataset_key(fingerprint))
        return isinstance(payload, dict) and payload.get("fingerprint") == fingerprint

    def set(
        self,
        api_key: str,
        dataset: FactionDataset,
        last_sync: Optional[datetime] = None,
    ) -> bool:
        """Snapshot ``dataset`` for ``api_key``, replacing any previous entry.

        Returns:
            True when written, False when the write failed (logged).
        """
        fingerprint = api_key_fingerprint(api_key)
        payload: Dict[str, Any] = {
            "fingerprint": fingerprint,
            "last_sync": (last_sync or datetime.now(timezone.utc)).isoformat(),
            "attacks": [attack.to_api() for attack in dataset.raw_attacks],
            "roster": [member.to_api() for member in dataset.roster],
        }
        try:
            self.store.set(self._dataset_key(fingerprint), payload)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to write dataset cache: %s", exc)
            return False
        logger.debug("Cached %d attacks", len(payload["attacks"]))
        return True

    def clear(self, api_key: Optional[str] = None) -> None:
        """Drop the entry for ``api_key``, or every dataset entry when omitted."""
        try:
            if api_key is None:
                removed = self.store.clear(DATASET_KEY_PREFIX)
                logger.info("Cleared %d cached dataset(s)", removed)
            else:
                self.store.remove(self._dataset_key(api_key_fingerprint(api_key)))
                logger.info("Cleared cached dataset")
        except OSError as exc:
            logger.warning("Failed to clear dataset cache: %s", exc)

    # ── Preferences ─────────────────────────────────────────────────────────────

    def save_time_filter(self, time_filter: TimeFilter) -> None:
        try:
            self.store.set(TIME_FILTER_KEY, time_filter.to_dict())
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to save time filter: %s", exc)

    def load_time_filter(self) -> Optional[TimeFilter]:
        raw = self.store.get(TIME_FILTER_KEY)
        if raw is None:
            return None
        try:
            return TimeFilter.from_dict(raw)
        except (AttributeError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed saved time filter: %s", exc)
            return None
