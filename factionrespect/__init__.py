"""FactionRespect: Torn faction attack log analysis.

Public API surface:
    - SyncConfig: Runtime configuration
    - FactionSync: Full and incremental sync of a faction's attack log
    - TornClient: Rate-limited Torn API v2 client
"""

__version__ = "1.0.0"
__author__ = "FactionRespect Contributors"

from config.settings import SyncConfig
from factionrespect.clients.torn_client import TornClient
from factionrespect.sync import FactionSync

__all__ = [
    "__version__",
    "SyncConfig",
    "FactionSync",
    "TornClient",
]
