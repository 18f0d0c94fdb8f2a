"""Recent-score polling service with persistent deduplication."""

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING

import discord

from scorebot.core.config import Settings
from scorebot.core.dedup_store import ScoreStore
from scorebot.core.logging import get_logger, new_correlation_id
from scorebot.discord.score_embeds import create_score_embed
from scorebot.osu.client import OsuClient
from scorebot.osu.normalizer import normalize
from scorebot.shared.exceptions import (
    ConflictError,
    DestinationUnavailableError,
    OsuAPIError,
    UndefinedAccuracyError,
    UnknownGradeError,
)
from scorebot.shared.models import RULESET_ORDER, GameMode, Player, RawResult, SweepResult

if TYPE_CHECKING:
    from scorebot.discord.poster import ScorePoster

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]
ClockFunc = Callable[[], float]


def compute_poll_interval(roster_size: int, mode_count: int = len(RULESET_ORDER), seconds_per_request: int = 2) -> int:
    """Seconds between sweeps so each request gets its share of the budget.

    One sweep makes ``roster_size * mode_count`` requests; spacing sweeps by
    ``seconds_per_request`` per request keeps the average at
    ``60 / seconds_per_request`` requests per minute however large the roster.

    Example:
        >>> compute_poll_interval(3)
        24
    """
    return max(1, roster_size * mode_count * seconds_per_request)


class IngestOutcome(str, Enum):
    """What happened to one fetched score."""

    SEEN = "seen"  # already recorded; nothing sent
    NOTIFIED = "notified"  # newly recorded and posted
    DROPPED = "dropped"  # newly recorded but could not be rendered or sent


class ScorePollingService:
    """Service for polling recent scores and posting the new ones.

    Each sweep walks every player and every mode in order, one request at a
    time; the spacing between sweeps is what keeps the request rate inside
    budget. At most ``score_retention`` scores are fetched per (player,
    mode), and each batch is handled oldest first so the store's sequence
    ids follow play time and pruning only ever drops plays that have left
    the recent window. For every fetched score:

    1. Check the store for (owning player, mode, score id)
    2. If unseen: record it, normalize, render and post
    3. Prune that player's mode history down to the retention limit

    A sweep that is still running when the next one is due makes the new
    one skip. Errors are contained as narrowly as possible: a failed fetch
    skips one (player, mode) pair, a bad score skips one score, an
    unreachable channel skips one sweep. Nothing stops the polling loop
    except ``stop()``.

    Attributes:
        MODES: Rulesets polled, in order
        fetch_limit: Scores requested per (player, mode), capped at retention
    """

    MODES: tuple[GameMode, ...] = RULESET_ORDER

    def __init__(
        self,
        client: OsuClient,
        store: ScoreStore,
        poster: "ScorePoster",
        players: Sequence[Player],
        settings: Settings,
        sleep: SleepFunc = asyncio.sleep,
        clock: ClockFunc = time.monotonic,
    ) -> None:
        """Initialize polling service with dependencies.

        Args:
            client: osu! API client
            store: Seen-score store
            poster: Discord poster for score notifications
            players: Roster resolved at startup
            settings: Application settings
            sleep: Awaitable sleep, replaceable in tests
            clock: Monotonic clock in seconds, replaceable in tests
        """
        self.client = client
        self.store = store
        self.poster = poster
        self.players: tuple[Player, ...] = tuple(players)
        self.settings = settings
        self._sleep = sleep
        self._clock = clock
        self.fetch_limit = min(settings.recent_score_limit, settings.score_retention)
        self.interval_seconds = compute_poll_interval(
            len(self.players), len(self.MODES), settings.poll_seconds_per_request
        )
        self.is_polling = False
        self.running = False
        self.task: asyncio.Task[None] | None = None

    async def poll_once(self) -> SweepResult:
        """Run one sweep over every player and mode.

        Returns:
            Counters for the sweep; ``skipped`` is set when the sweep did not run
        """
        if self.is_polling:
            logger.warning("osu.poll.overlap_skipped")
            return SweepResult(skipped=True)

        self.is_polling = True
        try:
            return await self._sweep()
        finally:
            self.is_polling = False

    async def _sweep(self) -> SweepResult:
        new_correlation_id()
        result = SweepResult()

        try:
            channel = self.poster.resolve_channel()
        except DestinationUnavailableError as e:
            logger.error(
                "osu.poll.destination_unavailable",
                channel_id=self.settings.discord_channel_id,
                error=str(e),
            )
            result.skipped = True
            return result

        logger.info("osu.poll.sweep.started", players=len(self.players), modes=len(self.MODES))

        for player in self.players:
            for mode in self.MODES:
                try:
                    scores = await self.client.fetch_recent_scores(player.id, mode, limit=self.fetch_limit)
                except OsuAPIError as e:
                    logger.error(
                        "osu.poll.fetch_failed",
                        user_id=player.id,
                        username=player.username,
                        mode=mode.value,
                        error=str(e),
                    )
                    result.failed_pairs.append((player.id, mode.value))
                    continue

                result.fetched += len(scores)

                # Oldest first, so store ids increase with play time
                for score in reversed(scores):
                    try:
                        outcome = await self.ingest(player, score, channel)
                    except Exception as e:
                        logger.error(
                            "osu.poll.score_failed",
                            user_id=player.id,
                            mode=mode.value,
                            score_id=score.id,
                            error=str(e),
                            exc_info=True,
                        )
                        continue

                    if outcome is not IngestOutcome.SEEN:
                        result.new += 1
                    if outcome is IngestOutcome.NOTIFIED:
                        result.notified += 1

        logger.info(
            "osu.poll.sweep.complete",
            fetched=result.fetched,
            new=result.new,
            notified=result.notified,
            failed_pairs=len(result.failed_pairs),
        )
        return result

    async def ingest(self, player: Player, score: RawResult, channel: discord.TextChannel) -> IngestOutcome:
        """Record a fetched score and post it if it has not been seen.

        Safe to call repeatedly with the same score: only the first call
        inserts and posts.

        Args:
            player: Roster player whose history is being polled
            score: Score as fetched
            channel: Destination resolved for this sweep

        Returns:
            What happened to the score

        Raises:
            StoreError: If the store fails for a reason other than a duplicate
        """
        mode = score.mode.value
        outcome = IngestOutcome.SEEN

        if not self.store.exists(score.user_id, mode, score.id):
            try:
                self.store.insert(score.user_id, mode, score.id)
            except ConflictError:
                logger.warning("osu.poll.insert_conflict", user_id=score.user_id, mode=mode, score_id=score.id)
            else:
                logger.info("osu.poll.score.new", user_id=score.user_id, mode=mode, score_id=score.id)
                outcome = await self._notify(score, channel)

        self.store.prune(player.id, mode, keep=self.settings.score_retention)
        return outcome

    async def _notify(self, score: RawResult, channel: discord.TextChannel) -> IngestOutcome:
        """Normalize, render and post one new score."""
        try:
            embed = create_score_embed(normalize(score))
        except (UndefinedAccuracyError, UnknownGradeError) as e:
            logger.warning(
                "osu.poll.render_skipped",
                score_id=score.id,
                mode=score.mode.value,
                rank=score.rank,
                error=str(e),
            )
            return IngestOutcome.DROPPED

        if await self.poster.send(channel, embed):
            return IngestOutcome.NOTIFIED
        return IngestOutcome.DROPPED

    async def _poll_loop(self) -> None:
        """Background task loop running one sweep per tick.

        Ticks are fixed-rate. If a sweep overruns one or more ticks, those
        ticks are skipped and the loop waits for the next one due.
        """
        next_tick = self._clock()
        while self.running:
            try:
                await self.poll_once()
            except Exception as e:
                logger.error("osu.poll.failed", error=str(e), exc_info=True)

            next_tick += self.interval_seconds
            delay = next_tick - self._clock()
            if delay < 0:
                missed = int(-delay // self.interval_seconds) + 1
                logger.warning("osu.poll.ticks_skipped", missed=missed, interval_seconds=self.interval_seconds)
                next_tick += missed * self.interval_seconds
                delay = next_tick - self._clock()

            await self._sleep(max(0.0, delay))

    async def start(self) -> None:
        """Start the polling service.

        Creates and starts the background polling task.
        """
        if self.running:
            logger.warning("osu.polling.already_running")
            return

        self.running = True
        self.task = asyncio.create_task(self._poll_loop())
        logger.info(
            "osu.polling.started",
            players=[player.username for player in self.players],
            interval_seconds=self.interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the polling service.

        Cancels the background polling task and waits for cleanup.
        """
        if not self.running:
            logger.warning("osu.polling.not_running")
            return

        self.running = False

        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass

        logger.info("osu.polling.stopped")
