"""Data models for Score Bot."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GameMode(str, Enum):
    """osu! rulesets, in sweep order.

    Values match the API's wire names so they can be used directly in
    request parameters, URLs, and the store's ``gamemode`` column.
    """

    OSU = "osu"
    TAIKO = "taiko"
    FRUITS = "fruits"
    MANIA = "mania"

    @property
    def display_name(self) -> str:
        """Human-readable ruleset name (e.g. ``osu!catch``)."""
        return MODE_DISPLAY_NAMES[self]

    @property
    def is_mania(self) -> bool:
        """Whether this mode scores with the mania hit-value table."""
        return self is GameMode.MANIA

    @classmethod
    def from_ruleset_id(cls, ruleset_id: int) -> "GameMode":
        """Map the API's numeric ruleset id (0-3) to a GameMode.

        Raises:
            ValueError: If the id is outside 0-3
        """
        if not isinstance(ruleset_id, int) or not 0 <= ruleset_id < len(RULESET_ORDER):
            raise ValueError(f"Unknown ruleset id: {ruleset_id}")
        return RULESET_ORDER[ruleset_id]


MODE_DISPLAY_NAMES: dict[GameMode, str] = {
    GameMode.OSU: "osu!",
    GameMode.TAIKO: "osu!taiko",
    GameMode.FRUITS: "osu!catch",
    GameMode.MANIA: "osu!mania",
}

RULESET_ORDER: tuple[GameMode, ...] = (
    GameMode.OSU,
    GameMode.TAIKO,
    GameMode.FRUITS,
    GameMode.MANIA,
)


class Player(BaseModel):
    """A tracked osu! player, resolved once at startup.

    Attributes:
        id: osu! user id
        username: Display name
        avatar_url: Avatar image URL
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="osu! user id")
    username: str = Field(..., description="Display name")
    avatar_url: str = Field("", description="Avatar image URL")

    @property
    def profile_url(self) -> str:
        """osu! website profile link."""
        return f"https://osu.ppy.sh/users/{self.id}"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Player":
        """Parse an API user object into a Player."""
        return cls(
            id=data["id"],
            username=data["username"],
            avatar_url=data.get("avatar_url") or "",
        )


class ScoreStatistics(BaseModel):
    """Raw hit counts as reported upstream; any bucket may be missing."""

    miss: int | None = None
    meh: int | None = None
    ok: int | None = None
    good: int | None = None
    great: int | None = None
    perfect: int | None = None


class HitCounts(BaseModel):
    """Hit counts with every bucket defaulted to zero."""

    miss: int = 0
    meh: int = 0
    ok: int = 0
    good: int = 0
    great: int = 0
    perfect: int = 0

    @classmethod
    def from_statistics(cls, statistics: ScoreStatistics) -> "HitCounts":
        """Fill absent buckets with zero."""
        return cls(
            miss=statistics.miss or 0,
            meh=statistics.meh or 0,
            ok=statistics.ok or 0,
            good=statistics.good or 0,
            great=statistics.great or 0,
            perfect=statistics.perfect or 0,
        )


class Beatmap(BaseModel):
    """The difficulty a score was set on."""

    id: int = Field(..., description="Beatmap (difficulty) id")
    mode: GameMode = Field(..., description="Beatmap's native ruleset")
    status: str = Field("", description="Ranked status (ranked, loved, graveyard, ...)")
    version: str = Field("", description="Difficulty name")

    @property
    def is_ranked(self) -> bool:
        """Whether the beatmap awards performance points."""
        return "ranked" in self.status


class Beatmapset(BaseModel):
    """The song a beatmap belongs to."""

    id: int = Field(..., description="Beatmapset id")
    title: str = Field(..., description="Song title")
    artist: str = Field(..., description="Song artist")
    cover_url: str = Field("", description="cover@2x image URL")


class _ScoreBase(BaseModel):
    """Fields shared by raw and normalized scores."""

    id: int = Field(..., description="Score id")
    user_id: int = Field(..., description="Owning player id")
    user: Player = Field(..., description="Owning player")
    beatmap: Beatmap
    beatmapset: Beatmapset
    mode: GameMode = Field(..., description="Ruleset the score was played in")
    total_score: int = Field(0, description="Standardised total score")
    legacy_total_score: int = Field(0, description="Classic total score")
    pp: float | None = Field(None, description="Performance points, if awarded")
    rank: str = Field(..., description="Grade letter (X, S, A, B, C, D)")
    mods: list[str] = Field(default_factory=list, description="Mod acronyms")
    max_combo: int = Field(0, description="Highest combo reached")
    ended_at: datetime = Field(..., description="When the play finished")

    @field_validator("ended_at")
    @classmethod
    def ensure_timezone_aware(cls, v: datetime) -> datetime:
        """Ensure timestamp is timezone-aware, adding UTC if naive."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class RawResult(_ScoreBase):
    """A recent score as returned by the osu! API.

    ``accuracy`` is ``None`` when the payload omits it; some payloads report
    ``0`` instead, which the normalizer treats the same way.
    """

    statistics: ScoreStatistics = Field(default_factory=ScoreStatistics)
    accuracy: float | None = Field(None, description="Accuracy in [0, 1], if reported")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RawResult":
        """Parse an API score object into a RawResult.

        The play's mode comes from ``ruleset_id`` when present, since
        converted plays report the beatmap's native mode on ``beatmap.mode``.
        """
        beatmap = Beatmap(
            id=data["beatmap"]["id"],
            mode=data["beatmap"]["mode"],
            status=data["beatmap"].get("status") or "",
            version=data["beatmap"].get("version") or "",
        )

        ruleset_id = data.get("ruleset_id")
        mode = GameMode.from_ruleset_id(ruleset_id) if ruleset_id is not None else beatmap.mode

        beatmapset_data = data["beatmapset"]
        covers = beatmapset_data.get("covers") or {}

        # Newer payloads send mod objects, legacy ones plain acronyms
        mods = [mod["acronym"] if isinstance(mod, dict) else str(mod) for mod in data.get("mods", [])]

        ended_at_str = data.get("ended_at") or data.get("created_at")
        ended_at = datetime.fromisoformat(str(ended_at_str).replace("Z", "+00:00"))

        user = Player.from_api(data["user"])

        return cls(
            id=data["id"],
            user_id=data.get("user_id", user.id),
            user=user,
            beatmap=beatmap,
            beatmapset=Beatmapset(
                id=beatmapset_data["id"],
                title=beatmapset_data["title"],
                artist=beatmapset_data["artist"],
                cover_url=covers.get("cover@2x", ""),
            ),
            mode=mode,
            statistics=ScoreStatistics(**(data.get("statistics") or {})),
            accuracy=data.get("accuracy"),
            total_score=data.get("total_score") or 0,
            legacy_total_score=data.get("legacy_total_score") or 0,
            pp=data.get("pp"),
            rank=data["rank"],
            mods=mods,
            max_combo=data.get("max_combo") or 0,
            ended_at=ended_at,
        )


class NormalizedResult(_ScoreBase):
    """A score ready for rendering.

    Attributes:
        statistics: Hit counts with absent buckets set to zero
        accuracy: Accuracy in [0, 1], computed when upstream omitted it
        display_score: Total score, or the classic score when the former is 0
    """

    statistics: HitCounts
    accuracy: float
    display_score: int


class DedupRecord(BaseModel):
    """A seen (player, mode, score) triple with its store-wide sequence id."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Store-wide autoincrement id")
    user_id: int
    score_id: int
    mode: str


class SweepResult(BaseModel):
    """Counters for one poll sweep."""

    fetched: int = 0
    new: int = 0
    notified: int = 0
    skipped: bool = False
    failed_pairs: list[tuple[int, str]] = Field(default_factory=list)
