"""Custom exception hierarchy for Score Bot."""


class ScoreBotError(Exception):
    """Base exception for all bot errors."""

    pass


class ConfigError(ScoreBotError):
    """Raised when configuration validation fails."""

    pass


class OsuAPIError(ScoreBotError):
    """Raised when osu! API requests fail."""

    pass


class DiscordAPIError(ScoreBotError):
    """Raised when Discord API requests fail."""

    pass


class DestinationUnavailableError(DiscordAPIError):
    """Raised when the target channel is missing or cannot be posted to."""

    pass


class StoreError(ScoreBotError):
    """Raised when score store operations fail."""

    pass


class ConflictError(StoreError):
    """Raised when a score triple is inserted twice."""

    pass


class UndefinedAccuracyError(ScoreBotError):
    """Raised when accuracy cannot be derived from a score's hit counts."""

    pass


class UnknownGradeError(ScoreBotError):
    """Raised when a score's grade has no color or icon."""

    pass
