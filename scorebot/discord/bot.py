"""Discord gateway connection and score channel lookup."""

import asyncio
from typing import Any

import discord

from scorebot.core.logging import get_logger
from scorebot.shared.exceptions import DestinationUnavailableError, DiscordAPIError

logger = get_logger(__name__)


class DiscordBot:
    """Owns the Discord client for the lifetime of the application.

    Entering the context logs in and keeps the gateway connected in a
    background task. The score channel is not cached: ``get_channel`` looks
    it up every time, so a channel that was deleted or had its permissions
    revoked is noticed on the next sweep.
    """

    def __init__(self, token: str, channel_id: int) -> None:
        """Set up the bot for one score channel.

        Args:
            token: Discord bot token
            channel_id: Channel new scores are posted to
        """
        self.token = token
        self.channel_id = channel_id
        self.client: discord.Client | None = None
        self._gateway_task: asyncio.Task[None] | None = None

    async def __aenter__(self) -> "DiscordBot":
        """Log in and block until the gateway reports ready.

        Raises:
            DiscordAPIError: If the token is invalid or login fails
        """
        self.client = discord.Client(intents=discord.Intents.default())

        @self.client.event
        async def on_ready() -> None:
            if self.client and self.client.user:
                logger.info("discord.bot.ready", username=str(self.client.user))

        try:
            await self.client.login(self.token)
        except (discord.LoginFailure, discord.HTTPException) as e:
            logger.error("discord.bot.login.failed", error=str(e), exc_info=True)
            raise DiscordAPIError(f"Discord login failed: {e}") from e

        logger.info("discord.bot.login.success")
        self._gateway_task = asyncio.create_task(self.client.connect(reconnect=True))
        await self.client.wait_until_ready()

        try:
            channel = self.get_channel()
        except DestinationUnavailableError as e:
            # Not fatal, every sweep checks again
            logger.warning("discord.bot.channel.unavailable", channel_id=self.channel_id, error=str(e))
        else:
            logger.info("discord.bot.channel.ready", channel_id=channel.id, channel_name=channel.name)

        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Close the client and stop the gateway task."""
        if self.client:
            await self.client.close()
            logger.info("discord.bot.closed")

        if self._gateway_task:
            self._gateway_task.cancel()
            try:
                await self._gateway_task
            except asyncio.CancelledError:
                pass
            self._gateway_task = None

    def get_channel(self) -> discord.TextChannel:
        """Resolve the score channel and check the bot may post there.

        Raises:
            DestinationUnavailableError: If the client is not logged in, or the
                channel is gone, is not a text channel, or denies sending
        """
        if self.client is None:
            raise DestinationUnavailableError("Discord client not initialized")

        found = self.client.get_channel(self.channel_id)
        if found is None:
            raise DestinationUnavailableError(f"Cannot access channel {self.channel_id}")
        if not isinstance(found, discord.TextChannel):
            raise DestinationUnavailableError(f"Channel {self.channel_id} is not a text channel")

        me = found.guild.me
        if me is not None and not found.permissions_for(me).send_messages:
            raise DestinationUnavailableError(f"Missing send permission in channel {self.channel_id}")

        return found
