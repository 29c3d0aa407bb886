"""Exception types for FactionRespect.

Anomalous pagination (non-advancing cursors, small-batch streaks) is not an
error: the fetch loop reports it through FetchTermination and stops cleanly.
"""

from __future__ import annotations

from typing import Any, List, Optional


class FactionRespectError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(FactionRespectError):
    """Missing or unusable configuration, raised before any request is made."""


class TornAPIError(FactionRespectError):
    """Non-success HTTP status or an error object reported by the Torn API.

    Args:
        message: Human-readable message, taken from the upstream payload when present.
        status: HTTP status code, if the failure came from the transport layer.
        code: Torn API error code, if the body carried one.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    def __repr__(self) -> str:
        return f"TornAPIError({self.message!r}, status={self.status!r}, code={self.code!r})"


class PaginationLimitError(FactionRespectError):
    """The batch ceiling was hit before the upstream signalled the end of data.

    The attacks accumulated so far are attached for inspection, but they are
    incomplete and must not be treated as a finished fetch.
    """

    def __init__(self, batches: int, attacks: Optional[List[Any]] = None) -> None:
        self.batches = batches
        self.attacks = list(attacks or [])
        super().__init__(
            f"Stopped after {batches} batches without reaching the end of the attack log "
            f"({len(self.attacks)} attacks collected, result incomplete)"
        )
