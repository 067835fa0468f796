"""
Pytest Configuration and Fixtures for QuakeBot Tests
====================================================

Purpose
-------
Centralized fixtures for the QuakeBot test suite.

Responsibilities
----------------
- SQLite (aiosqlite) database per test for fact store tests
- Testcontainers PostgreSQL for the dialect-specific suite
- Handler context and mocked services for router tests
- Discord.py mocks for bot tests

Architecture Notes
------------------
- Unit tests use mocks (fast, isolated)
- Integration tests use a real database: a throwaway SQLite file, or a
  PostgreSQL testcontainer when a container runtime is available
- DatabaseService is initialized against the test database and shut down
  after each test, so every test starts with empty tables
"""

from __future__ import annotations

import os
from datetime import date
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from testcontainers.postgres import PostgresContainer

from quakebot.bot.context import BotContext
from quakebot.core.config.config import Config
from quakebot.core.database.service import DatabaseService
from quakebot.core.logging.logger import get_logger
from quakebot.modules.relay.service import RelaySettings

logger = get_logger(__name__)

FIXED_DAY = date(2024, 12, 1)

# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Configure pytest environment."""
    os.environ["ENVIRONMENT"] = "testing"
    os.environ["LOG_LEVEL"] = "DEBUG"


# ============================================================================
# DATABASE FIXTURES (Integration Tests)
# ============================================================================


async def _start_database(monkeypatch: pytest.MonkeyPatch, url: str) -> None:
    monkeypatch.setattr(Config, "DATABASE_URL", url)
    monkeypatch.setattr(Config, "ENVIRONMENT", "testing")
    await DatabaseService.initialize()
    await DatabaseService.create_schema()


@pytest_asyncio.fixture
async def sqlite_database(
    tmp_path, monkeypatch
) -> AsyncGenerator[type[DatabaseService], None]:
    """
    DatabaseService bound to a fresh SQLite file.

    Scope: function (new file per test, clean slate)
    """
    await _start_database(monkeypatch, f"sqlite+aiosqlite:///{tmp_path / 'quake.db'}")
    yield DatabaseService
    await DatabaseService.shutdown()


@pytest.fixture(scope="module")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start a PostgreSQL testcontainer, or skip when Docker is unavailable.

    Scope: module (container persists across the module's tests)
    """
    logger.info("Starting PostgreSQL testcontainer...")
    container = PostgresContainer(image="postgres:16-alpine", driver="asyncpg")
    try:
        container.start()
    except Exception as exc:
        pytest.skip(f"PostgreSQL testcontainer unavailable: {exc}")

    logger.info(
        "PostgreSQL testcontainer started: %s",
        container.get_connection_url(),
    )

    yield container

    logger.info("Stopping PostgreSQL testcontainer...")
    container.stop()


@pytest_asyncio.fixture
async def postgres_database(
    postgres_container: PostgresContainer, monkeypatch
) -> AsyncGenerator[type[DatabaseService], None]:
    """
    DatabaseService bound to the PostgreSQL container, with empty tables.

    Scope: function
    """
    await _start_database(monkeypatch, postgres_container.get_connection_url())
    yield DatabaseService

    from sqlalchemy import text

    async with DatabaseService.get_transaction() as session:
        await session.execute(text("TRUNCATE membership, attempts"))
    await DatabaseService.shutdown()


@pytest.fixture
def fixed_clock():
    """Clock for FactStore that always reports FIXED_DAY."""
    return lambda: FIXED_DAY


# ============================================================================
# CONTEXT & MOCK FIXTURES (Unit Tests)
# ============================================================================


@pytest.fixture
def relay_settings() -> RelaySettings:
    return RelaySettings(
        host="smtp.example.test",
        port=465,
        username="bot@example.test",
        password="secret",
        sender="EarthQuakers <bot@example.test>",
        recipients=("one@example.test", "two@example.test"),
        subject="EarthQuakers announcement",
    )


@pytest.fixture
def bot_context(relay_settings) -> BotContext:
    return BotContext(
        aoc_url="https://adventofcode.test/leaderboard.json",
        aoc_token="cookie-value",
        http_timeout_seconds=5.0,
        relay=relay_settings,
    )


@pytest.fixture
def mock_progle_service(mocker):
    service = mocker.MagicMock()
    service.record_message = mocker.AsyncMock(return_value=None)
    service.averages_text = mocker.AsyncMock(return_value="you have an average of 4 of classic")
    return service


@pytest.fixture
def mock_advent_service(mocker):
    service = mocker.MagicMock()
    service.leaderboard_text = mocker.AsyncMock(return_value="1. alice who has score 10 and 2 stars")
    return service


@pytest.fixture
def mock_relay(mocker):
    relay = mocker.MagicMock()
    relay.should_relay = mocker.MagicMock(side_effect=lambda text: "@everyone" in text)
    relay.relay = mocker.AsyncMock(return_value=True)
    return relay


# ============================================================================
# DISCORD.PY MOCK FIXTURES
# ============================================================================


@pytest.fixture
def mock_guild(mocker):
    def _make(guild_id: int):
        guild = mocker.MagicMock()
        guild.id = guild_id
        return guild

    return _make
