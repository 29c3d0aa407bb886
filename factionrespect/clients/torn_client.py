"""Torn API v2 client for FactionRespect.

Handles all HTTP communication with the Torn faction endpoints: request
construction, rate-limited submission, cursor pagination with loop
detection, and error translation.

No business logic lives here; this client returns typed raw records.
Classification and aggregation happen in the analysis layer.

Known Torn API gotchas:
- faction/members returns either an id-keyed mapping or an array depending
  on the API revision. Both are normalized to a list.
- Errors usually arrive as HTTP 200 with an ``error`` object in the body.
  Always check the body, never rely on the status code alone.
- The ``next`` link does not reliably disappear at the end of the log; the
  same link can come back again, or a trickle of tiny pages can follow.
  fetch_attack_range() treats both as end-of-data signals.
- Cursor pages can straddle the requested window, so every batch is
  re-filtered on ``started`` before accumulation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import requests
from requests import Session
from requests.adapters import HTTPAdapter

from config.defaults import (
    ATTACKS_ENDPOINT,
    BATCH_LIMIT,
    MAX_BATCHES,
    MEMBERS_ENDPOINT,
    RATE_LIMIT_DELAY_SECONDS,
    REQUEST_TIMEOUT,
    SMALL_BATCH_SIZE,
    SMALL_BATCH_STREAK,
    TORN_BASE_URL,
    YIELD_EVERY_BATCHES,
    YIELD_SECONDS,
)
from config.settings import SyncConfig
from factionrespect.clients.request_queue import RateLimitedRequestQueue
from factionrespect.errors import ConfigurationError, PaginationLimitError, TornAPIError
from factionrespect.models.attacks import RawAttack
from factionrespect.models.dataset import (
    AttackBatch,
    AttackFetchResult,
    FetchTermination,
    PageCursor,
    TimeWindow,
)
from factionrespect.models.members import FactionMember

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, Optional[int]], None]


def normalize_roster(members: Any) -> List[FactionMember]:
    """Normalize a roster payload (id-keyed mapping or array) to an ordered list.

    Args:
        members: The ``members`` field of a faction/members response.

    Returns:
        List of FactionMember in upstream order.
    """
    if isinstance(members, dict):
        return [FactionMember.from_api(raw, key=key) for key, raw in members.items()]
    if isinstance(members, list):
        return [FactionMember.from_api(raw) for raw in members]
    logger.warning("Unexpected roster payload type %s, treating as empty", type(members).__name__)
    return []


def parse_attack_batch(payload: Dict[str, Any]) -> AttackBatch:
    """Turn a faction/attacks response body into an AttackBatch."""
    metadata = payload.get("_metadata") or {}
    links = metadata.get("links") or {}
    return AttackBatch(
        attacks=[RawAttack.from_api(raw) for raw in (payload.get("attacks") or [])],
        next_cursor=PageCursor.from_link(links.get("next")),
        total_hint=metadata.get("total"),
    )


class TornClient:
    """Client for the Torn API v2 faction endpoints.

    All requests of one instance go through a single RateLimitedRequestQueue,
    so at most one upstream call is outstanding at a time. Blocking
    ``requests`` calls run in a worker thread to keep the event loop free.

    Args:
        api_key: Torn API key. Required.
        base_url: API base URL.
        request_timeout: HTTP request timeout in seconds.
        rate_limit_delay_seconds: Minimum gap between successive calls.
        batch_limit: Attacks requested per page.
        max_batches: Runaway guard for a single paginated fetch.
        small_batch_size: Pages at or below this size count as small.
        small_batch_streak: Consecutive small pages that end a fetch.
        yield_every_batches: Unbounded fetches yield to the loop this often.
        yield_seconds: Length of that yield.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = TORN_BASE_URL,
        request_timeout: int = REQUEST_TIMEOUT,
        rate_limit_delay_seconds: float = RATE_LIMIT_DELAY_SECONDS,
        batch_limit: int = BATCH_LIMIT,
        max_batches: int = MAX_BATCHES,
        small_batch_size: int = SMALL_BATCH_SIZE,
        small_batch_streak: int = SMALL_BATCH_STREAK,
        yield_every_batches: int = YIELD_EVERY_BATCHES,
        yield_seconds: float = YIELD_SECONDS,
    ) -> None:
        if not api_key:
            raise ConfigurationError("API key is required")
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.batch_limit = batch_limit
        self.max_batches = max_batches
        self.small_batch_size = small_batch_size
        self.small_batch_streak = small_batch_streak
        self.yield_every_batches = yield_every_batches
        self.yield_seconds = yield_seconds
        self.queue = RateLimitedRequestQueue(min_interval_seconds=rate_limit_delay_seconds)

        self._session = Session()
        adapter = HTTPAdapter(max_retries=0)   # No automatic retries; errors surface to the caller
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    @classmethod
    def from_config(cls, config: SyncConfig) -> "TornClient":
        """Build a client from a SyncConfig, failing fast on a missing key."""
        return cls(
            api_key=config.require_api_key(),
            base_url=config.base_url,
            request_timeout=config.request_timeout,
            rate_limit_delay_seconds=config.rate_limit_delay_seconds,
            batch_limit=config.batch_limit,
            max_batches=config.max_batches,
            small_batch_size=config.small_batch_size,
            small_batch_streak=config.small_batch_streak,
            yield_every_batches=config.yield_every_batches,
            yield_seconds=config.yield_seconds,
        )

    # ── Credential ─────────────────────────────────────────────────────────────

    @property
    def api_key(self) -> str:
        return self._api_key

    def set_api_key(self, new_key: str) -> None:
        if not new_key:
            raise ConfigurationError("API key cannot be empty")
        self._api_key = new_key

    # ── Transport ──────────────────────────────────────────────────────────────

    def _build_url(self, endpoint: str) -> str:
        """Join an endpoint path onto the base URL."""
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _request(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Execute one blocking GET and translate every failure into TornAPIError.

        Args:
            endpoint: Path relative to the base URL.
            params: Query parameters, without the key.

        Returns:
            Parsed JSON body.
        """
        url = self._build_url(endpoint)
        query = dict(params)
        query["key"] = self._api_key

        try:
            resp = self._session.get(
                url,
                params=query,
                headers={"Accept": "application/json"},
                timeout=self.request_timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.error("Torn request to %s failed: %s", endpoint, exc)
            raise TornAPIError(f"Request to Torn API failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            message = f"API Error: {resp.status_code} {resp.reason}"
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                message = body["error"].get("error") or message
            logger.warning("Torn returned HTTP %d for %s", resp.status_code, endpoint)
            raise TornAPIError(message, status=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise TornAPIError(
                f"Torn API returned an unparseable body for {endpoint}", status=resp.status_code
            ) from exc

        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            if isinstance(error, dict):
                raise TornAPIError(
                    error.get("error") or "Unknown API error", code=error.get("code")
                )
            raise TornAPIError(str(error))

        return data

    async def _queued_get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self.queue.submit(lambda: asyncio.to_thread(self._request, endpoint, params))

    # ── Endpoints ──────────────────────────────────────────────────────────────

    async def fetch_roster(self) -> List[FactionMember]:
        """Fetch the current faction roster.

        Returns:
            Current members in upstream order.
        """
        payload = await self._queued_get(MEMBERS_ENDPOINT, {})
        roster = normalize_roster(payload.get("members"))
        logger.debug("Fetched roster: %d members", len(roster))
        return roster

    def _attack_params(
        self,
        limit: int,
        from_ts: Optional[int],
        to_ts: Optional[int],
        cursor: Optional[PageCursor],
    ) -> Dict[str, Any]:
        # A cursor replays its own query wholesale; explicit bounds only seed the first page
        if cursor is not None:
            cursor_params = cursor.params
            if cursor_params:
                return cursor_params
            logger.warning("Cursor carried no query parameters: %.200s", cursor.token)

        params: Dict[str, Any] = {
            "limit": limit,
            "sort": "ASC",
            "filters": "outgoing",
        }
        if from_ts is not None:
            params["from"] = from_ts
        if to_ts is not None:
            params["to"] = to_ts
        return params

    async def fetch_attack_batch(
        self,
        limit: int = BATCH_LIMIT,
        from_ts: Optional[int] = None,
        to_ts: Optional[int] = None,
        cursor: Optional[PageCursor] = None,
    ) -> AttackBatch:
        """Fetch one page of outgoing attacks, oldest first.

        Args:
            limit: Page size for the first request of a sequence.
            from_ts: Lower bound (epoch seconds) for the first request.
            to_ts: Upper bound (epoch seconds) for the first request.
            cursor: Continuation token from the previous page. When given,
                its embedded parameters are used instead of the arguments above.

        Returns:
            AttackBatch with the page's attacks, next cursor and total hint.
        """
        params = self._attack_params(limit, from_ts, to_ts, cursor)
        payload = await self._queued_get(ATTACKS_ENDPOINT, params)
        return parse_attack_batch(payload)

    async def fetch_attack_range(
        self,
        from_ts: Optional[int] = None,
        to_ts: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AttackFetchResult:
        """Follow the attacks cursor until the window is exhausted.

        Termination checks, in order, after every page:
          1. empty page
          2. returned cursor equals the cursor just used (anomalous)
          3. ``small_batch_streak`` consecutive pages of <= ``small_batch_size``
          4. no cursor returned
          5. an explicit ``to_ts`` reached by the page's newest attack

        Args:
            from_ts: Optional inclusive lower bound (epoch seconds).
            to_ts: Optional inclusive upper bound (epoch seconds).
            on_progress: Called as ``(accumulated_count, total_hint)`` after each page.

        Returns:
            AttackFetchResult with the in-window attacks (roster left empty).

        Raises:
            TornAPIError: On any upstream failure; nothing partial is returned.
            PaginationLimitError: When ``max_batches`` pages did not exhaust the log.
        """
        window = TimeWindow(from_ts=from_ts, to_ts=to_ts)
        attacks: List[RawAttack] = []
        cursor: Optional[PageCursor] = None
        small_streak = 0
        batches = 0
        total_hint: Optional[int] = None
        termination: Optional[str] = None

        while termination is None:
            if batches >= self.max_batches:
                logger.error(
                    "Attack fetch hit the %d-batch ceiling with %d attacks; result incomplete",
                    self.max_batches,
                    len(attacks),
                )
                raise PaginationLimitError(batches, attacks)

            batch = await self.fetch_attack_batch(self.batch_limit, from_ts, to_ts, cursor)
            batches += 1

            if not batch.attacks:
                termination = FetchTermination.EMPTY_BATCH
                break

            in_window = [attack for attack in batch.attacks if window.contains(attack.started)]
            attacks.extend(in_window)
            if batch.total_hint is not None:
                total_hint = batch.total_hint

            if on_progress is not None:
                on_progress(len(attacks), total_hint)

            logger.debug(
                "Batch %d: %d attacks (%d in window), next cursor %s",
                batches,
                len(batch.attacks),
                len(in_window),
                "present" if batch.next_cursor else "absent",
            )

            next_cursor = batch.next_cursor
            small_streak = small_streak + 1 if len(batch.attacks) <= self.small_batch_size else 0

            if next_cursor is not None and next_cursor == cursor:
                logger.warning(
                    "Torn returned the same cursor twice (batch %d), stopping", batches
                )
                termination = FetchTermination.REPEATED_CURSOR
            elif small_streak >= self.small_batch_streak:
                logger.info(
                    "%d consecutive batches of <= %d attacks, assuming end of data",
                    self.small_batch_streak,
                    self.small_batch_size,
                )
                termination = FetchTermination.SMALL_BATCH_STREAK
            elif next_cursor is None:
                termination = FetchTermination.END_OF_DATA
            elif to_ts is not None and max(a.started for a in batch.attacks) >= to_ts:
                termination = FetchTermination.REACHED_UPPER_BOUND
            else:
                cursor = next_cursor
                if window.unbounded and batches % self.yield_every_batches == 0:
                    await asyncio.sleep(self.yield_seconds)

        logger.info(
            "Fetched %d attacks in %d batch(es) (termination=%s)",
            len(attacks),
            batches,
            termination,
        )
        return AttackFetchResult(
            attacks=attacks,
            batches=batches,
            termination=termination,
            total_hint=total_hint,
            has_more_data=False,
        )

    async def fetch_all_attacks(
        self,
        from_ts: Optional[int] = None,
        to_ts: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AttackFetchResult:
        """Fetch the roster, then every outgoing attack in the window.

        Args:
            from_ts: Optional inclusive lower bound (epoch seconds).
            to_ts: Optional inclusive upper bound (epoch seconds).
            on_progress: Per-page progress callback.

        Returns:
            AttackFetchResult with attacks and roster populated.
        """
        roster = await self.fetch_roster()
        result = await self.fetch_attack_range(from_ts, to_ts, on_progress)
        result.roster = roster
        return result

    async def test_connection(self) -> bool:
        """Return True when the key can read the faction roster."""
        try:
            await self.fetch_roster()
            return True
        except TornAPIError as exc:
            logger.error("Torn connection test failed: %s", exc)
            return False

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "TornClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
