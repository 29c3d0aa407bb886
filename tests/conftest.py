"""Shared pytest fixtures for FactionRespect tests.

Conventions:
- Fixture data lives in tests/fixtures/ as static JSON files
- Torn HTTP calls are mocked at the requests.Session level
- No real external HTTP calls are made in any test
"""

from __future__ import annotations

import copy
import json
import zlib
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

_FIXTURES_DIR = Path(__file__).parent / "fixtures"

TEST_API_KEY = "test-key-0123456789"


# ── Raw fixture data loaders ─────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def attacks_raw() -> Dict[str, Any]:
    """Raw faction/attacks response: 6 attacks, the last one without an attacker."""
    with open(_FIXTURES_DIR / "sample_attacks.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(scope="session")
def members_raw() -> Dict[str, Any]:
    """Raw faction/members response in the id-keyed mapping form (Alice, Bob)."""
    with open(_FIXTURES_DIR / "sample_members.json", encoding="utf-8") as f:
        return json.load(f)


# ── Model object fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def sample_raw_attacks(attacks_raw):
    """RawAttack list from fixture.

    a1 bonus (Alice), a2 war + chain (Alice), a3 retaliation (Bob, lost),
    a4 overseas (Carol, former member), a5 chain (Bob), a6 attackerless.
    """
    from factionrespect.models.attacks import RawAttack

    return [RawAttack.from_api(raw) for raw in attacks_raw["attacks"]]


@pytest.fixture
def sample_roster(members_raw):
    """Current roster from fixture: Alice (id 1) and Bob (id 2)."""
    from factionrespect.clients.torn_client import normalize_roster

    return normalize_roster(members_raw["members"])


@pytest.fixture
def sample_classified(sample_raw_attacks):
    """Classified attacks from fixture (attackerless record discarded)."""
    from factionrespect.analysis.classifier import classify_attacks

    return classify_attacks(sample_raw_attacks)


# ── Builders ─────────────────────────────────────────────────────────────────────

def build_attack_record(
    code: str,
    started: int,
    attacker_id: Optional[int] = 1,
    attacker_name: str = "Alice",
    result: str = "Attacked",
    respect_gain: float = 1.0,
    chain: int = 0,
    is_ranked_war: bool = False,
    **modifiers: float,
) -> Dict[str, Any]:
    """Build one attack record in the Torn API shape."""
    mods = {"fair_fight": 1, "war": 1, "retaliation": 1, "group": 1, "overseas": 1, "chain": 1, "warlord": 1}
    mods.update(modifiers)
    attacker = None
    if attacker_id is not None:
        attacker = {"id": attacker_id, "name": attacker_name, "level": 10, "faction": {"id": 77, "name": "Respect Farmers"}}
    return {
        "id": zlib.crc32(code.encode("utf-8")),
        "code": code,
        "started": started,
        "ended": started + 30,
        "attacker": attacker,
        "defender": {"id": 900, "name": "Target", "level": 10, "faction": None},
        "result": result,
        "respect_gain": respect_gain,
        "respect_loss": 0,
        "chain": chain,
        "is_interrupted": False,
        "is_stealthed": False,
        "is_raid": False,
        "is_ranked_war": is_ranked_war,
        "modifiers": mods,
    }


@pytest.fixture
def attack_record():
    """Factory fixture: ``attack_record(code, started, **overrides) -> dict``."""
    return build_attack_record


@pytest.fixture
def make_attack():
    """Factory fixture: ``make_attack(code, started, **overrides) -> RawAttack``."""
    from factionrespect.models.attacks import RawAttack

    def _make(code: str, started: int, **overrides: Any):
        return RawAttack.from_api(build_attack_record(code, started, **overrides))

    return _make


@pytest.fixture
def make_classified(make_attack):
    """Factory fixture: ``make_classified(code, started, **overrides) -> ClassifiedAttack``."""
    from factionrespect.analysis.classifier import classify_attack

    def _make(code: str, started: int, **overrides: Any):
        return classify_attack(make_attack(code, started, **overrides))

    return _make


def build_attack_page(
    attacks: List[Dict[str, Any]],
    next_link: Optional[str] = None,
    total: Optional[int] = None,
) -> Dict[str, Any]:
    """Build a faction/attacks response body."""
    metadata: Dict[str, Any] = {"links": {"next": next_link, "prev": None}}
    if total is not None:
        metadata["total"] = total
    return {"attacks": copy.deepcopy(attacks), "_metadata": metadata}


@pytest.fixture
def attack_page():
    """Factory fixture: ``attack_page(records, next_link=None, total=None) -> dict``."""
    return build_attack_page


# ── HTTP response mocks ──────────────────────────────────────────────────────────

def build_torn_response(payload: Any = None, status_code: int = 200, invalid_json: bool = False) -> MagicMock:
    """Mock requests.Response carrying a JSON payload."""
    mock_resp = MagicMock()
    mock_resp.status_code = status_code
    mock_resp.reason = "OK" if status_code == 200 else "Error"
    if invalid_json:
        mock_resp.json.side_effect = ValueError("Expecting value")
    else:
        mock_resp.json.return_value = payload if payload is not None else {}
    return mock_resp


@pytest.fixture
def torn_response():
    """Factory fixture: ``torn_response(payload, status_code=200, invalid_json=False)``."""
    return build_torn_response


# ── Client, config and cache fixtures ────────────────────────────────────────────

@pytest.fixture
def torn_client():
    """TornClient with rate limiting and loop yields disabled."""
    from factionrespect.clients.torn_client import TornClient

    client = TornClient(TEST_API_KEY, rate_limit_delay_seconds=0.0, yield_seconds=0.0)
    yield client
    client.close()


@pytest.fixture
def test_sync_config(tmp_path):
    """SyncConfig pointing the cache and exports at tmp_path."""
    from config.settings import SyncConfig

    return SyncConfig(
        api_key=TEST_API_KEY,
        rate_limit_delay_seconds=0.0,
        yield_seconds=0.0,
        cache_dir=str(tmp_path / "cache"),
        export_dir=str(tmp_path / "exports"),
    )


@pytest.fixture
def dataset_cache(tmp_path):
    """DatasetCache over a JsonFileStore in tmp_path."""
    from factionrespect.io.cache import DatasetCache

    return DatasetCache.at(tmp_path / "cache")
