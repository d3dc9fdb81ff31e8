"""Shared pytest fixtures for untappd-links tests."""

import pytest

from untappd_links.config import AppConfig, UntappdConfig
from untappd_links.migrations import run_migrations
from untappd_links.repository import GameDatabase


@pytest.fixture
def db_path(tmp_path):
    """Temporary game database built by the real migrations."""
    db_file = tmp_path / "test_games.db"
    run_migrations(db_file)
    return db_file


@pytest.fixture
def db(db_path):
    return GameDatabase(db_path)


@pytest.fixture
def no_env_credentials(monkeypatch):
    """Make sure credentials cannot leak in from the environment."""
    monkeypatch.delenv("UNTAPPD_CLIENT_ID", raising=False)
    monkeypatch.delenv("UNTAPPD_CLIENT_SECRET", raising=False)


@pytest.fixture
def config(db_path, no_env_credentials):
    """Config with Untappd credentials set."""
    return AppConfig(
        db_path=db_path,
        untappd=UntappdConfig(client_id="test_id", client_secret="test_secret"),
    )


@pytest.fixture
def config_without_credentials(db_path, no_env_credentials):
    """Config with no Untappd credentials anywhere."""
    return AppConfig(db_path=db_path, untappd=UntappdConfig())
