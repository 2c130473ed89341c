"""Tests for environment configuration."""

import pytest

from common.config import Config, ConfigError
from common.constants import API_BASE_URL

ENV_KEYS = ("DISCORD_TOKEN", "API_BASE_URL", "REQUEST_TIMEOUT_SECONDS", "DATA_PATH", "CHANNELS_PATH", "FORCE")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    cfg = Config()
    assert cfg.DISCORD_TOKEN is None
    assert cfg.API_BASE_URL == API_BASE_URL
    assert cfg.REQUEST_TIMEOUT_SECONDS == 15.0
    assert cfg.DATA_PATH == "data/messages.json"
    assert cfg.CHANNELS_PATH == "data/channels.json"
    assert cfg.FORCE is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DISCORD_TOKEN", "abc")
    monkeypatch.setenv("API_BASE_URL", "http://localhost:9000/api/")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("FORCE", "yes")
    cfg = Config()
    assert cfg.require_token() == "abc"
    assert cfg.API_BASE_URL == "http://localhost:9000/api"
    assert cfg.REQUEST_TIMEOUT_SECONDS == 2.5
    assert cfg.FORCE is True


def test_bad_timeout_falls_back(monkeypatch):
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "soon")
    assert Config().REQUEST_TIMEOUT_SECONDS == 15.0


def test_blank_values_use_defaults(monkeypatch):
    monkeypatch.setenv("DATA_PATH", "  ")
    assert Config().DATA_PATH == "data/messages.json"


def test_missing_token():
    with pytest.raises(ConfigError):
        Config().require_token()
