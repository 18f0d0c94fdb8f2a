"""Shared test fixtures for osu! integration tests."""

import copy
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from scorebot.osu.client import OsuClient
from scorebot.shared.models import Player, RawResult

SAMPLE_SCORE_PAYLOAD: dict[str, Any] = {
    "id": 4123456789,
    "user_id": 12241009,
    "ruleset_id": 0,
    "accuracy": 0.9876,
    "total_score": 812345,
    "legacy_total_score": 5432100,
    "pp": 187.64,
    "rank": "A",
    "max_combo": 742,
    "ended_at": "2025-01-09T12:00:00Z",
    "mods": [{"acronym": "HD"}, {"acronym": "DT"}],
    "statistics": {"great": 512, "ok": 23, "meh": 2, "miss": 4, "large_tick_hit": 30},
    "beatmap": {"id": 75, "mode": "osu", "status": "ranked", "version": "Normal"},
    "beatmapset": {
        "id": 1,
        "title": "DISCO PRINCE",
        "artist": "Kenji Ninuma",
        "covers": {"cover@2x": "https://assets.ppy.sh/beatmaps/1/covers/cover@2x.jpg"},
    },
    "user": {"id": 12241009, "username": "TestPlayer", "avatar_url": "https://a.ppy.sh/12241009"},
}


@pytest.fixture
def sample_score_payload() -> dict[str, Any]:
    """Sample recent-score object as returned by the osu! API.

    Returns:
        Deep copy of a standard-mode score payload
    """
    return copy.deepcopy(SAMPLE_SCORE_PAYLOAD)


@pytest.fixture
def make_score() -> Callable[..., RawResult]:
    """Factory building RawResults from the sample payload with overrides.

    Returns:
        Callable accepting payload keys as keyword arguments
    """

    def _make(**overrides: Any) -> RawResult:
        payload = copy.deepcopy(SAMPLE_SCORE_PAYLOAD)
        payload.update(overrides)
        return RawResult.from_api(payload)

    return _make


@pytest.fixture
def player() -> Player:
    """The player who owns the sample score."""
    return Player(id=12241009, username="TestPlayer", avatar_url="https://a.ppy.sh/12241009")


@pytest.fixture
def osu_client() -> OsuClient:
    """Create an osu! client instance holding a valid token.

    Returns:
        OsuClient with test credentials and a token that does not expire
    """
    client = OsuClient(4242, "test_secret")
    client.access_token = "test_access_token"
    client.token_expires_at = float("inf")
    return client


def _build_response(status: int, json_data: Any = None, headers: dict[str, str] | None = None) -> MagicMock:
    """Build an aiohttp-style async context manager yielding a response."""
    response = AsyncMock()
    response.status = status
    response.json = AsyncMock(return_value=json_data)
    response.headers = headers or {}

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=None)
    return context


@pytest.fixture
def mock_response() -> Callable[..., MagicMock]:
    """Factory for mocked aiohttp response context managers.

    Returns:
        Callable taking (status, json_data=None, headers=None)
    """
    return _build_response
