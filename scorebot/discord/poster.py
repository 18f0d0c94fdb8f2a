"""Discord posting service for score notifications."""

import discord

from scorebot.core.logging import get_logger
from scorebot.discord.bot import DiscordBot

logger = get_logger(__name__)


class ScorePoster:
    """Posts score embeds to the configured channel.

    Delivery is best effort: a failed send is logged and dropped. The score
    is already recorded as seen by then, so it will not be posted again.
    """

    def __init__(self, bot: DiscordBot) -> None:
        """Initialize poster with bot instance.

        Args:
            bot: Initialized DiscordBot instance
        """
        self.bot = bot

    def resolve_channel(self) -> discord.TextChannel:
        """Look up the destination channel for this sweep.

        Raises:
            DestinationUnavailableError: If the channel cannot be posted to
        """
        return self.bot.get_channel()

    async def send(self, channel: discord.TextChannel, embed: discord.Embed) -> bool:
        """Send one embed.

        Args:
            channel: Channel returned by resolve_channel
            embed: Rendered score embed

        Returns:
            True if Discord accepted the message
        """
        try:
            await channel.send(embed=embed)
        except discord.HTTPException as e:
            logger.error(
                "discord.score.send_failed",
                channel_id=channel.id,
                title=embed.title,
                status=e.status,
                error=str(e),
            )
            return False

        logger.info("discord.score.sent", channel_id=channel.id, title=embed.title)
        return True
