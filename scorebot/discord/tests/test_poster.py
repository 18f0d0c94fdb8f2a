"""Tests for the score poster."""

from collections.abc import Callable
from unittest.mock import MagicMock

import discord
import pytest

from scorebot.discord.bot import DiscordBot
from scorebot.discord.poster import ScorePoster
from scorebot.discord.score_embeds import create_score_embed
from scorebot.shared.exceptions import DestinationUnavailableError
from scorebot.shared.models import NormalizedResult


@pytest.fixture
def mock_bot(mock_discord_channel: MagicMock) -> MagicMock:
    """Create a mock Discord bot.

    Returns:
        Mock DiscordBot whose get_channel returns the mock channel
    """
    bot = MagicMock(spec=DiscordBot)
    bot.get_channel.return_value = mock_discord_channel
    return bot


@pytest.fixture
def embed(make_result: Callable[..., NormalizedResult]) -> discord.Embed:
    return create_score_embed(make_result())


def test_resolve_channel_delegates_to_bot(mock_bot: MagicMock, mock_discord_channel: MagicMock) -> None:
    """Test that the channel comes from the bot on each call."""
    poster = ScorePoster(mock_bot)

    assert poster.resolve_channel() is mock_discord_channel
    assert poster.resolve_channel() is mock_discord_channel
    assert mock_bot.get_channel.call_count == 2


def test_resolve_channel_propagates_unavailable(mock_bot: MagicMock) -> None:
    """Test that an unavailable destination is raised to the caller."""
    mock_bot.get_channel.side_effect = DestinationUnavailableError("gone")
    poster = ScorePoster(mock_bot)

    with pytest.raises(DestinationUnavailableError):
        poster.resolve_channel()


@pytest.mark.asyncio
async def test_send_success(
    mock_bot: MagicMock, mock_discord_channel: MagicMock, embed: discord.Embed
) -> None:
    """Test that a delivered embed returns True."""
    poster = ScorePoster(mock_bot)

    assert await poster.send(mock_discord_channel, embed) is True
    mock_discord_channel.send.assert_awaited_once_with(embed=embed)


@pytest.mark.asyncio
async def test_send_http_error_returns_false(
    mock_bot: MagicMock, mock_discord_channel: MagicMock, embed: discord.Embed
) -> None:
    """Test that a Discord error is logged and reported as not sent."""
    mock_discord_channel.send.side_effect = discord.HTTPException(MagicMock(status=500), "Test error")
    poster = ScorePoster(mock_bot)

    assert await poster.send(mock_discord_channel, embed) is False
    # No retry
    assert mock_discord_channel.send.await_count == 1


@pytest.mark.asyncio
async def test_send_forbidden_returns_false(
    mock_bot: MagicMock, mock_discord_channel: MagicMock, embed: discord.Embed
) -> None:
    """Test that a permission error mid-run is not raised."""
    mock_discord_channel.send.side_effect = discord.Forbidden(MagicMock(status=403), "Missing Permissions")
    poster = ScorePoster(mock_bot)

    assert await poster.send(mock_discord_channel, embed) is False
