"""Score Bot main entry point."""

import asyncio
import signal
import sys
from dataclasses import dataclass, field

from pydantic import ValidationError

from scorebot.core.config import Settings, get_settings
from scorebot.core.dedup_store import ScoreStore
from scorebot.core.logging import get_logger, setup_logging
from scorebot.discord.bot import DiscordBot
from scorebot.discord.poster import ScorePoster
from scorebot.osu.client import OsuClient
from scorebot.osu.polling import ScorePollingService
from scorebot.shared.exceptions import ConfigError, OsuAPIError
from scorebot.shared.models import Player

logger = get_logger(__name__)


@dataclass
class Application:
    """Everything started at boot, torn down in reverse order on shutdown."""

    settings: Settings
    store: ScoreStore | None = None
    osu_client: OsuClient | None = None
    discord_bot: DiscordBot | None = None
    polling_service: ScorePollingService | None = None
    players: tuple[Player, ...] = field(default_factory=tuple)


async def resolve_players(client: OsuClient, identifiers: list[int | str]) -> tuple[Player, ...]:
    """Look up every configured player once.

    Unknown players are logged and left out.

    Raises:
        ConfigError: If none of the players could be resolved
    """
    players: list[Player] = []
    for identifier in identifiers:
        player = await client.get_user(identifier)
        if player is None:
            logger.warning("osu.player.not_found", player=identifier)
            continue
        players.append(player)
        logger.info("osu.player.resolved", user_id=player.id, username=player.username)

    if not players:
        raise ConfigError(f"None of the configured players could be resolved: {identifiers}")

    return tuple(players)


async def startup(settings: Settings) -> Application:
    """Initialize application on startup.

    Raises:
        ConfigError: If credentials are rejected or no player resolves
    """
    app = Application(settings=settings)

    logger.info(
        "application.lifecycle.started",
        version=settings.app_version,
        environment=settings.environment,
    )
    logger.info(
        "application.config.loaded",
        log_level=settings.log_level,
        players=len(settings.player_list),
        score_db_path=settings.score_db_path,
        retention=settings.score_retention,
    )

    try:
        app.store = ScoreStore(settings.score_db_path)
        app.store.open()

        app.osu_client = OsuClient(settings.osu_client_id, settings.osu_client_secret)
        await app.osu_client.__aenter__()

        try:
            await app.osu_client.authenticate()
            app.players = await resolve_players(app.osu_client, settings.player_list)
        except OsuAPIError as e:
            logger.error("osu.auth.failed", error=str(e))
            raise ConfigError(f"osu! API setup failed: {e}") from e

        app.discord_bot = DiscordBot(settings.discord_token, settings.discord_channel_id)
        await app.discord_bot.__aenter__()

        app.polling_service = ScorePollingService(
            client=app.osu_client,
            store=app.store,
            poster=ScorePoster(app.discord_bot),
            players=app.players,
            settings=settings,
        )
        await app.polling_service.start()
    except BaseException:
        await shutdown(app)
        raise

    logger.info("application.startup.completed", players=[p.username for p in app.players])
    return app


async def shutdown(app: Application) -> None:
    """Cleanup on application shutdown."""
    logger.info("application.shutdown.started")

    if app.polling_service and app.polling_service.running:
        await app.polling_service.stop()

    if app.discord_bot:
        await app.discord_bot.__aexit__(None, None, None)

    if app.osu_client:
        await app.osu_client.__aexit__(None, None, None)

    if app.store:
        app.store.close()

    logger.info("application.shutdown.completed")


async def main(settings: Settings) -> None:
    """Main application loop; runs until SIGINT or SIGTERM."""
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        logger.info("application.signal.received", signal=signal.Signals(sig).name)
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler, sig)

    app = await startup(settings)
    try:
        await stop_event.wait()
    finally:
        await shutdown(app)


def run() -> None:
    """Entry point for running the bot."""
    try:
        # Load settings first to validate configuration
        settings = get_settings()
    except (ConfigError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(log_level=settings.log_level)

    try:
        asyncio.run(main(settings))
    except ConfigError as e:
        # Configuration errors should exit immediately with clear message
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.error("application.error.fatal", error=str(e), exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
