"""Configuration management using Pydantic Settings."""

from typing import ClassVar

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scorebot.shared.exceptions import ConfigError

# Singleton instance
_settings: "Settings | None" = None


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Discord configuration
    discord_token: str
    discord_channel_id: int

    # osu! API configuration
    osu_client_id: int
    osu_client_secret: str
    osu_players: str = "12241009,22248746,37516721"  # Comma-separated ids or usernames
    recent_score_limit: int = 10  # Never above score_retention

    # Score store configuration
    score_db_path: str = "data/scores.sqlite"
    score_retention: int = 10

    # Seconds budgeted per upstream request; 2 averages 30 requests per minute
    poll_seconds_per_request: int = 2

    # Application settings
    log_level: str = "INFO"
    app_version: str = "0.1.0"
    environment: str = "development"

    # Valid log levels
    VALID_LOG_LEVELS: ClassVar[set[str]] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        v_upper = v.upper()
        if v_upper not in cls.VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {v}. Must be one of {', '.join(cls.VALID_LOG_LEVELS)}"
            )
        return v_upper

    @field_validator("osu_players")
    @classmethod
    def validate_players(cls, v: str) -> str:
        """Validate at least one player is configured."""
        if not [player for player in v.split(",") if player.strip()]:
            raise ConfigError("OSU_PLAYERS must list at least one player id or username")
        return v

    @field_validator("score_retention")
    @classmethod
    def validate_score_retention(cls, v: int) -> int:
        """Validate retained scores per player and mode (1-100)."""
        if not 1 <= v <= 100:
            raise ConfigError(f"Score retention must be between 1 and 100, got {v}")
        return v

    @field_validator("recent_score_limit")
    @classmethod
    def validate_recent_score_limit(cls, v: int) -> int:
        """Validate recent score page size (1-100, the API maximum)."""
        if not 1 <= v <= 100:
            raise ConfigError(f"Recent score limit must be between 1 and 100, got {v}")
        return v

    @field_validator("poll_seconds_per_request")
    @classmethod
    def validate_poll_seconds_per_request(cls, v: int) -> int:
        """Validate per-request budget (1-60 seconds)."""
        if not 1 <= v <= 60:
            raise ConfigError(f"Seconds per request must be between 1 and 60, got {v}")
        return v

    @model_validator(mode="after")
    def validate_limit_within_retention(self) -> "Settings":
        """Validate one fetch never returns more scores than are retained."""
        if self.recent_score_limit > self.score_retention:
            raise ConfigError(
                f"Recent score limit ({self.recent_score_limit}) must not exceed "
                f"score retention ({self.score_retention})"
            )
        return self

    @property
    def player_list(self) -> list[int | str]:
        """Parse comma-separated players into ids and usernames.

        Numeric entries become ints (user ids); anything else is kept as a
        username.

        Returns:
            List of player identifiers (e.g., [12241009, 'peppy'])
        """
        players: list[int | str] = []
        for player in self.osu_players.split(","):
            player = player.strip()
            if not player:
                continue
            players.append(int(player) if player.isdigit() else player)
        return players


def get_settings() -> Settings:
    """Get or create the global Settings instance (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings
