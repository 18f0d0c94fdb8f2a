"""Shared pytest fixtures for Score Bot tests."""

from pathlib import Path

import pytest

from scorebot.core.config import Settings


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary score store path for testing.

    Args:
        tmp_path: pytest's temporary directory fixture

    Returns:
        Path to temporary scores.sqlite file
    """
    return tmp_path / "data" / "scores.sqlite"


@pytest.fixture
def mock_settings(temp_db_path: Path) -> Settings:
    """Create Settings instance with test values.

    Args:
        temp_db_path: Temporary score store path

    Returns:
        Settings instance configured for testing
    """
    return Settings(
        discord_token="test_discord_token",
        discord_channel_id=123456789012345678,
        osu_client_id=12345,
        osu_client_secret="test_osu_secret",
        osu_players="12241009,22248746,37516721",
        score_db_path=str(temp_db_path),
        log_level="INFO",
        app_version="0.1.0",
        environment="test",
    )


@pytest.fixture(autouse=True)
def reset_settings_cache() -> None:
    """Reset the global settings cache before and after each test.

    This ensures tests don't interfere with each other via cached settings.
    """
    import scorebot.core.config

    scorebot.core.config._settings = None

    yield

    scorebot.core.config._settings = None
