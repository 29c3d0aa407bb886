"""FactionRespect I/O package.

File read/write operations only: JSON persistence, the dataset cache and
member statistics export.
"""

from factionrespect.io.cache import CachedDataset, DatasetCache, JsonFileStore
from factionrespect.io.exporters import (
    export_member_stats,
    member_stats_to_csv,
    member_stats_to_json,
)
from factionrespect.io.persistence import load_json, save_json

__all__ = [
    "CachedDataset",
    "DatasetCache",
    "JsonFileStore",
    "export_member_stats",
    "member_stats_to_csv",
    "member_stats_to_json",
    "load_json",
    "save_json",
]
