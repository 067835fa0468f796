"""
Unit tests for Config loading and validation.
"""

import pytest

from quakebot.bot.context import BotContext
from quakebot.core.config.config import Config, Environment
from quakebot.core.exceptions import ConfigurationError, ErrorSeverity

REQUIRED_ENV = {
    "DISCORD_TOKEN": "discord-token",
    "DATABASE_URL": "postgresql+asyncpg://quake:quake@db/quake",
    "AOC_URL": "https://adventofcode.test/leaderboard.json",
    "AOC_TOKEN": "cookie",
    "SMTP_PASSWORD": "smtp-secret",
}


@pytest.fixture
def clean_config(monkeypatch):
    for key in REQUIRED_ENV:
        monkeypatch.delenv(key, raising=False)
    for key in ("RELAY_TO", "SMTP_PORT", "HTTP_TIMEOUT_SECONDS", "LOG_JSON"):
        monkeypatch.delenv(key, raising=False)
    Config.reset()
    yield
    Config.reset()


@pytest.fixture
def required_env(monkeypatch, clean_config):
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.mark.unit
class TestValidate:
    def test_loads_required_values(self, required_env):
        Config.validate()

        assert Config.DISCORD_TOKEN == "discord-token"
        assert Config.AOC_URL == "https://adventofcode.test/leaderboard.json"
        assert Config.SMTP_HOST == "smtp.gmail.com"
        assert Config.SMTP_PORT == 465

    @pytest.mark.parametrize("missing", sorted(REQUIRED_ENV))
    def test_missing_required_value_is_fatal(self, required_env, monkeypatch, missing):
        monkeypatch.delenv(missing)

        with pytest.raises(ConfigurationError) as exc_info:
            Config.validate()

        assert exc_info.value.config_key == missing
        assert exc_info.value.severity is ErrorSeverity.CRITICAL

    def test_every_missing_value_is_reported(self, required_env, monkeypatch):
        monkeypatch.delenv("AOC_TOKEN")
        monkeypatch.delenv("DISCORD_TOKEN")

        with pytest.raises(ConfigurationError) as exc_info:
            Config.validate()

        assert exc_info.value.config_key == "DISCORD_TOKEN, AOC_TOKEN"

    def test_relay_recipients_are_split(self, required_env, monkeypatch):
        monkeypatch.setenv("RELAY_TO", "a@x.test, b@x.test,,")

        Config.validate()

        assert Config.RELAY_TO == ["a@x.test", "b@x.test"]

    def test_bad_int_falls_back_to_default(self, required_env, monkeypatch):
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "soon")

        Config.validate()

        assert Config.HTTP_TIMEOUT_SECONDS == 15

    def test_log_json_unset_is_none(self, required_env):
        Config.validate()
        assert Config.LOG_JSON is None


@pytest.mark.unit
class TestEnvironment:
    def test_from_string(self):
        assert Environment.from_string("Production") is Environment.PRODUCTION

    def test_unknown_defaults_to_development(self):
        assert Environment.from_string("moon") is Environment.DEVELOPMENT


@pytest.mark.unit
class TestBotContext:
    def test_snapshot_of_config(self, required_env, monkeypatch):
        monkeypatch.setenv("RELAY_TO", "a@x.test")
        Config.validate()

        context = BotContext.from_config(Config)

        assert context.aoc_token == "cookie"
        assert context.relay.recipients == ("a@x.test",)
        assert context.relay.marker == "@everyone"
        assert "cookie" not in repr(context)
        with pytest.raises(AttributeError):
            context.aoc_url = "elsewhere"  # type: ignore[misc]
