"""
Integration Tests for FactStore on PostgreSQL
=============================================

Runs the conflict-ignoring inserts through the asyncpg dialect, including
concurrent reports racing on the same key. Skipped when no container
runtime is available.
"""

import asyncio

import pytest
from sqlalchemy import func, select

from quakebot.database.models import Attempt, Membership
from quakebot.modules.progle.models import Averages, GameMode, GameResult
from quakebot.modules.progle.repository import FactStore

pytestmark = [pytest.mark.integration, pytest.mark.database, pytest.mark.postgres]


async def count(database, model) -> int:
    async with database.get_session() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestPostgresRecord:
    async def test_concurrent_duplicates_insert_once(self, postgres_database, fixed_clock):
        # Arrange
        store = FactStore(postgres_database, clock=fixed_clock)
        results = [GameResult(mode=GameMode.CLASSIC, attempts=n) for n in range(1, 11)]

        # Act
        outcomes = await asyncio.gather(
            *(store.record(10, 20, result) for result in results)
        )

        # Assert
        assert sum(o.attempt_created for o in outcomes) == 1
        assert sum(o.membership_created for o in outcomes) == 1
        assert await count(postgres_database, Attempt) == 1
        assert await count(postgres_database, Membership) == 1

    async def test_first_value_wins(self, postgres_database, fixed_clock):
        store = FactStore(postgres_database, clock=fixed_clock)

        await store.record(10, 20, GameResult(mode=GameMode.CODE, attempts=2))
        await store.record(10, 20, GameResult(mode=GameMode.CODE, attempts=9))

        assert await store.averages(20) == Averages(code=2.0)

    async def test_health_check(self, postgres_database):
        assert await postgres_database.health_check() is True
