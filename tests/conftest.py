"""
Shared fixtures for log archiver tests.
"""

import pytest

from src.config import Config

ALL_VARS = (
    Config.LOGSTORE_VARS
    + [Config.DRIVE_FOLDER_VAR, Config.SERVICE_ACCOUNT_VAR, Config.AUTH_MODE_VAR]
    + Config.OAUTH_VARS
    + [
        "ARCHIVE_PREFIX",
        "SKIP_EMPTY_EXPORT",
        "NOISE_FILTER_PATTERN",
        "NOISE_FILTER_FIELD",
        "LOGSTORE_TIMEOUT",
        "LOG_LEVEL",
    ]
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure no real archiver settings leak into a test."""
    for name in ALL_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def base_env():
    """A complete OAuth-based configuration."""
    return {
        "BETTERSTACK_CH_URL": "https://eu-nbg-2-connect.betterstackdata.com/",
        "BETTERSTACK_CH_USER": "archiver",
        "BETTERSTACK_CH_PASS": "s3cret",
        "BETTERSTACK_LOGS_TABLE": "t123456_app_logs",
        "DRIVE_FOLDER_ID": "folder-abc",
        "GOOGLE_OAUTH_CLIENT_ID": "client-id",
        "GOOGLE_OAUTH_CLIENT_SECRET": "client-secret",
        "GOOGLE_OAUTH_REFRESH_TOKEN": "refresh-token",
    }


@pytest.fixture
def set_env(monkeypatch):
    """Copy a mapping into the process environment."""

    def _set(env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)

    return _set


@pytest.fixture
def settings(base_env):
    return Config.load(base_env)
