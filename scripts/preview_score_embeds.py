"""Test script to post sample score embeds to Discord.

Run with: uv run python scripts/preview_score_embeds.py

Posts one embed per mode and one per grade to TEST_DISCORD_CHANNEL_ID
(falls back to DISCORD_CHANNEL_ID) for visual testing.
"""

import asyncio
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

# Add parent directory to path so we can import scorebot modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")

from scorebot.discord.grade_colors import GRADE_COLORS
from scorebot.discord.score_embeds import create_score_embed
from scorebot.osu.normalizer import normalize
from scorebot.shared.models import (
    Beatmap,
    Beatmapset,
    GameMode,
    Player,
    RawResult,
    ScoreStatistics,
)

SAMPLE_PLAYER = Player(
    id=2,
    username="peppy",
    avatar_url="https://a.ppy.sh/2",
)

SAMPLE_BEATMAPSET = Beatmapset(
    id=1,
    title="DISCO PRINCE",
    artist="Kenji Ninuma",
    cover_url="https://assets.ppy.sh/beatmaps/1/covers/cover@2x.jpg",
)


def sample_score(mode: GameMode, rank: str = "A", status: str = "ranked") -> RawResult:
    """Build a plausible score; accuracy left empty so it is derived."""
    if mode.is_mania:
        statistics = ScoreStatistics(perfect=812, great=301, good=44, ok=12, meh=3, miss=7)
    else:
        statistics = ScoreStatistics(great=512, ok=23, meh=2, miss=4)

    return RawResult(
        id=4_000_000_000 + hash((mode, rank)) % 1_000_000,
        user_id=SAMPLE_PLAYER.id,
        user=SAMPLE_PLAYER,
        beatmap=Beatmap(id=75, mode=mode, status=status, version="Normal"),
        beatmapset=SAMPLE_BEATMAPSET,
        mode=mode,
        statistics=statistics,
        accuracy=None,
        total_score=0,
        legacy_total_score=1_234_567,
        pp=187.6,
        rank=rank,
        mods=["HD", "DT"] if rank in ("X", "S") else [],
        max_combo=742,
        ended_at=datetime.now(UTC),
    )


async def main() -> None:
    """Connect, post the sample embeds, and disconnect."""
    import discord

    token = os.environ["DISCORD_TOKEN"]
    channel_id = int(os.environ.get("TEST_DISCORD_CHANNEL_ID") or os.environ["DISCORD_CHANNEL_ID"])

    client = discord.Client(intents=discord.Intents.default())

    @client.event
    async def on_ready() -> None:
        try:
            channel = client.get_channel(channel_id)
            if not isinstance(channel, discord.TextChannel):
                print(f"Channel {channel_id} not found or not a text channel", file=sys.stderr)
                return

            await channel.send("**--- Score Embed Preview ---**")

            for mode in GameMode:
                embed = create_score_embed(normalize(sample_score(mode)))
                await channel.send(content=f"**{mode.display_name}**", embed=embed)

            for grade in GRADE_COLORS:
                embed = create_score_embed(normalize(sample_score(GameMode.OSU, rank=grade)))
                await channel.send(content=f"**Grade {grade}**", embed=embed)

            embed = create_score_embed(normalize(sample_score(GameMode.OSU, status="graveyard")))
            await channel.send(content="**Unranked beatmap**", embed=embed)

            await channel.send("**--- End of Preview ---**")
        finally:
            await client.close()

    await client.start(token)


if __name__ == "__main__":
    asyncio.run(main())
