"""FactionRespect clients package.

HTTP API clients only: no business logic in this layer.
The client handles connection management, rate limiting, pagination and
response parsing.
"""

from factionrespect.clients.request_queue import RateLimitedRequestQueue
from factionrespect.clients.torn_client import TornClient, normalize_roster

__all__ = [
    "RateLimitedRequestQueue",
    "TornClient",
    "normalize_roster",
]
