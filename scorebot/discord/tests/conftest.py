"""Shared fixtures for Discord tests."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from scorebot.shared.models import (
    Beatmap,
    Beatmapset,
    GameMode,
    HitCounts,
    NormalizedResult,
    Player,
)


@pytest.fixture
def make_result() -> Callable[..., NormalizedResult]:
    """Factory for normalized results with sensible defaults.

    Returns:
        Callable accepting NormalizedResult fields as keyword overrides,
        plus ``status`` for the beatmap's ranked status
    """

    def _make(mode: GameMode = GameMode.OSU, status: str = "ranked", **overrides: Any) -> NormalizedResult:
        player = Player(id=12241009, username="TestPlayer", avatar_url="https://a.ppy.sh/12241009")
        fields: dict[str, Any] = {
            "id": 4123456789,
            "user_id": player.id,
            "user": player,
            "beatmap": Beatmap(id=75, mode=mode, status=status, version="Normal"),
            "beatmapset": Beatmapset(
                id=1,
                title="DISCO PRINCE",
                artist="Kenji Ninuma",
                cover_url="https://assets.ppy.sh/beatmaps/1/covers/cover@2x.jpg",
            ),
            "mode": mode,
            "total_score": 812345,
            "legacy_total_score": 0,
            "pp": 187.64,
            "rank": "A",
            "mods": [],
            "max_combo": 742,
            "ended_at": datetime(2025, 1, 9, 12, 0, tzinfo=UTC),
            "statistics": HitCounts(great=512, ok=23, meh=2, miss=4),
            "accuracy": 0.98765,
            "display_score": 812345,
        }
        fields.update(overrides)
        return NormalizedResult(**fields)

    return _make


@pytest.fixture
def mock_discord_channel() -> MagicMock:
    """Create a mock Discord text channel the bot may post to.

    Returns:
        Mock text channel with async send method
    """
    channel = MagicMock(spec=discord.TextChannel)
    channel.send = AsyncMock()
    channel.id = 123456789
    channel.permissions_for.return_value.send_messages = True
    return channel
