"""Discord embed creation for new scores."""

import discord

from scorebot.discord.grade_colors import grade_color, grade_icon_url, mode_icon_url
from scorebot.shared.models import NormalizedResult

NO_MODS = "No Mods"
UNRANKED = "[ Unranked ]"

# Field names need at least one character; a zero-width space renders blank
BLANK = "\u200b"


def format_title(result: NormalizedResult) -> str:
    """Build the embed title with the pp value or an Unranked marker.

    Example:
        >>> format_title(result)
        'Blue Zenith - xi   [ 727pp ]'
    """
    song = f"{result.beatmapset.title} - {result.beatmapset.artist}"
    if result.beatmap.is_ranked:
        return f"{song}   [ {round(result.pp or 0)}pp ]"
    return f"{song}   {UNRANKED}"


def format_mods(mods: list[str]) -> str:
    """Join mod acronyms, or return the No Mods marker."""
    return ", ".join(mods) if mods else NO_MODS


def format_accuracy(accuracy: float) -> str:
    """Format accuracy in [0, 1] as a percentage with two decimals."""
    return f"{accuracy * 100:.2f}%"


def beatmap_url(result: NormalizedResult) -> str:
    """Link to the exact difficulty on the osu! website."""
    return (
        f"https://osu.ppy.sh/beatmapsets/{result.beatmapset.id}"
        f"#{result.beatmap.mode.value}/{result.beatmap.id}"
    )


def create_score_embed(result: NormalizedResult) -> discord.Embed:
    """Create a Discord embed for one score.

    Every ruleset gets score, accuracy and max combo. Mania additionally
    lists all six judgement counts, zeros included.

    Args:
        result: Normalized score

    Returns:
        Discord embed ready to send

    Raises:
        UnknownGradeError: If the score's grade has no palette entry
    """
    color = grade_color(result.rank)
    thumbnail = grade_icon_url(result.rank)

    embed = discord.Embed(
        title=format_title(result),
        url=beatmap_url(result),
        description=f"Mods: `{format_mods(result.mods)}`",
        color=color,
        timestamp=result.ended_at,
    )
    embed.set_author(
        name=result.user.username,
        url=result.user.profile_url,
        icon_url=result.user.avatar_url or None,
    )

    embed.add_field(name="Score", value=f"`{result.display_score}`", inline=True)
    embed.add_field(name="Accuracy", value=f"`{format_accuracy(result.accuracy)}`", inline=True)
    embed.add_field(name="Max Combo", value=f"`{result.max_combo}`", inline=True)

    if result.mode.is_mania:
        _add_judgement_fields(embed, result)

    if result.beatmapset.cover_url:
        embed.set_image(url=result.beatmapset.cover_url)
    embed.set_thumbnail(url=thumbnail)
    embed.set_footer(text=result.mode.display_name, icon_url=mode_icon_url(result.mode))

    return embed


def _add_judgement_fields(embed: discord.Embed, result: NormalizedResult) -> None:
    """Append the six mania judgement counts after a spacer row."""
    stats = result.statistics

    embed.add_field(name=BLANK, value=BLANK, inline=False)
    for name, count in (
        ("Perfect", stats.perfect),
        ("Good", stats.good),
        ("Meh", stats.meh),
        ("Great", stats.great),
        ("Ok", stats.ok),
        ("Miss", stats.miss),
    ):
        embed.add_field(name=name, value=str(count), inline=True)
