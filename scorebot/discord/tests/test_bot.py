"""Tests for Discord bot channel lookup."""

from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from scorebot.discord.bot import DiscordBot
from scorebot.shared.exceptions import DestinationUnavailableError, DiscordAPIError


@pytest.fixture
def bot(mock_discord_channel: MagicMock) -> DiscordBot:
    """Create a bot with a mock client that knows one channel."""
    bot = DiscordBot(token="test_token", channel_id=123456789)
    bot.client = MagicMock(spec=discord.Client)
    bot.client.get_channel.return_value = mock_discord_channel
    return bot


def test_get_channel_success(bot: DiscordBot, mock_discord_channel: MagicMock) -> None:
    """Test that a postable text channel is returned."""
    assert bot.get_channel() is mock_discord_channel
    bot.client.get_channel.assert_called_once_with(123456789)


def test_get_channel_without_client() -> None:
    """Test that lookup before login raises."""
    bot = DiscordBot(token="test_token", channel_id=1)

    with pytest.raises(DestinationUnavailableError, match="not initialized"):
        bot.get_channel()


def test_get_channel_missing(bot: DiscordBot) -> None:
    """Test that a deleted or invisible channel raises."""
    bot.client.get_channel.return_value = None

    with pytest.raises(DestinationUnavailableError, match="Cannot access channel"):
        bot.get_channel()


def test_get_channel_not_text(bot: DiscordBot) -> None:
    """Test that a voice channel is rejected."""
    bot.client.get_channel.return_value = MagicMock(spec=discord.VoiceChannel)

    with pytest.raises(DestinationUnavailableError, match="not a text channel"):
        bot.get_channel()


def test_get_channel_without_send_permission(bot: DiscordBot, mock_discord_channel: MagicMock) -> None:
    """Test that a channel the bot cannot post in raises."""
    mock_discord_channel.permissions_for.return_value.send_messages = False

    with pytest.raises(DestinationUnavailableError, match="Missing send permission"):
        bot.get_channel()


def test_destination_unavailable_is_discord_error() -> None:
    """Test that callers catching DiscordAPIError also see unavailability."""
    assert issubclass(DestinationUnavailableError, DiscordAPIError)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        discord.LoginFailure("Improper token has been passed."),
        discord.HTTPException(MagicMock(status=500), "Service unavailable"),
    ],
)
async def test_login_failure_raises_discord_api_error(error: Exception) -> None:
    """Test that a rejected token or failed login surfaces as DiscordAPIError."""
    client = MagicMock(spec=discord.Client)
    client.event = lambda coro: coro
    client.login = AsyncMock(side_effect=error)

    with patch("scorebot.discord.bot.discord.Client", return_value=client):
        with pytest.raises(DiscordAPIError, match="Discord login failed"):
            await DiscordBot(token="bad_token", channel_id=1).__aenter__()

    client.connect.assert_not_called()
