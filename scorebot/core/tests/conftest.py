"""Shared fixtures for core tests."""

from pathlib import Path

import pytest


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary score store path for testing.

    Args:
        tmp_path: pytest's temporary directory fixture

    Returns:
        Path to a scores.sqlite file in a not-yet-existing directory
    """
    return tmp_path / "data" / "scores.sqlite"


@pytest.fixture
def required_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Set the required environment variables for Settings."""
    monkeypatch.setenv("DISCORD_TOKEN", "discord_token")
    monkeypatch.setenv("DISCORD_CHANNEL_ID", "123456789")
    monkeypatch.setenv("OSU_CLIENT_ID", "4242")
    monkeypatch.setenv("OSU_CLIENT_SECRET", "osu_secret")
    return monkeypatch


@pytest.fixture(autouse=True)
def reset_settings_cache() -> None:
    """Reset the global settings cache around each test."""
    import scorebot.core.config

    scorebot.core.config._settings = None

    yield

    scorebot.core.config._settings = None
