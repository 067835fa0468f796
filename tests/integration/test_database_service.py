"""
Integration Tests for DatabaseService
=====================================

Purpose
-------
Test engine lifecycle, sessions, transactions and schema creation against a
real SQLite database file.

Testing Strategy
----------------
- Each test gets a fresh database file (see the sqlite_database fixture)
- Tests actual database behavior, not mocks
"""

import pytest
from sqlalchemy import select, text

from quakebot.core.config.config import Config
from quakebot.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)
from quakebot.database.models import Attempt, Membership


# ============================================================================
# LIFECYCLE TESTS
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestLifecycle:
    async def test_health_check(self, sqlite_database):
        assert await sqlite_database.health_check() is True

    async def test_initialize_is_idempotent(self, sqlite_database):
        engine = sqlite_database._engine

        await sqlite_database.initialize()

        assert sqlite_database._engine is engine

    async def test_use_before_initialize_raises(self):
        with pytest.raises(DatabaseNotInitializedError):
            async with DatabaseService.get_session():
                pass

    async def test_missing_url_raises(self, monkeypatch):
        monkeypatch.setattr(Config, "DATABASE_URL", "")

        with pytest.raises(DatabaseInitializationError):
            await DatabaseService.initialize()

        assert DatabaseService._engine is None

    async def test_health_check_without_engine(self):
        assert await DatabaseService.health_check() is False

    async def test_schema_created(self, sqlite_database):
        async with sqlite_database.get_session() as session:
            result = await session.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table'")
            )
            tables = {row[0] for row in result}

        assert {"membership", "attempts"} <= tables


# ============================================================================
# TRANSACTION TESTS
# ============================================================================


@pytest.mark.integration
@pytest.mark.database
class TestTransactions:
    async def test_commit_on_success(self, sqlite_database):
        # Act
        async with sqlite_database.get_transaction() as session:
            session.add(Membership(server=1, person=2))

        # Assert
        async with sqlite_database.get_session() as session:
            rows = (await session.execute(select(Membership))).scalars().all()
        assert [(m.server, m.person) for m in rows] == [(1, 2)]

    async def test_rollback_on_error(self, sqlite_database):
        # Act
        with pytest.raises(ValueError):
            async with sqlite_database.get_transaction() as session:
                session.add(Attempt(person=1, day=2, codemode=False, numberofguess=3))
                await session.flush()
                raise ValueError("abort")

        # Assert
        async with sqlite_database.get_session() as session:
            rows = (await session.execute(select(Attempt))).scalars().all()
        assert rows == []
