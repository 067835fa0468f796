"""
Integration Tests for FactStore on SQLite
=========================================

Covers the at-most-once invariants, first-write-wins, the no-community
short circuit and the averages query.
"""

import asyncio
from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from quakebot.core.exceptions import StorageError
from quakebot.database.models import Attempt, Membership
from quakebot.modules.progle.models import Averages, GameMode, GameResult
from quakebot.modules.progle.repository import FactStore, day_number

FIXED_DAY = date(2024, 12, 1)

CLASSIC_3 = GameResult(mode=GameMode.CLASSIC, attempts=3)
CLASSIC_5 = GameResult(mode=GameMode.CLASSIC, attempts=5)
CODE_2 = GameResult(mode=GameMode.CODE, attempts=2)


async def count(database, model) -> int:
    async with database.get_session() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def attempts_for(database, person):
    async with database.get_session() as session:
        result = await session.execute(
            select(Attempt).where(Attempt.person == person).order_by(Attempt.day, Attempt.codemode)
        )
        return list(result.scalars().all())


@pytest.mark.unit
class TestDayNumber:
    def test_epoch_is_day_one(self):
        assert day_number(date(1, 1, 1)) == 1

    def test_consecutive_days(self):
        assert day_number(date(2024, 3, 1)) - day_number(date(2024, 2, 28)) == 2


@pytest.mark.integration
@pytest.mark.database
class TestRecord:
    async def test_first_record_creates_both_rows(self, sqlite_database, fixed_clock):
        store = FactStore(sqlite_database, clock=fixed_clock)

        outcome = await store.record(10, 20, CLASSIC_3)

        assert outcome.skipped is False
        assert outcome.membership_created is True
        assert outcome.attempt_created is True
        assert outcome.day == FIXED_DAY.toordinal()
        (row,) = await attempts_for(sqlite_database, 20)
        assert (row.day, row.codemode, row.numberofguess) == (FIXED_DAY.toordinal(), False, 3)

    async def test_identical_record_twice_is_one_row(self, sqlite_database, fixed_clock):
        store = FactStore(sqlite_database, clock=fixed_clock)

        await store.record(10, 20, CLASSIC_3)
        second = await store.record(10, 20, CLASSIC_3)

        assert second.membership_created is False
        assert second.attempt_created is False
        assert await count(sqlite_database, Attempt) == 1
        assert await count(sqlite_database, Membership) == 1

    async def test_first_value_wins(self, sqlite_database, fixed_clock):
        store = FactStore(sqlite_database, clock=fixed_clock)

        await store.record(10, 20, CLASSIC_3)
        await store.record(10, 20, CLASSIC_5)

        (row,) = await attempts_for(sqlite_database, 20)
        assert row.numberofguess == 3

    async def test_modes_are_separate_keys(self, sqlite_database, fixed_clock):
        store = FactStore(sqlite_database, clock=fixed_clock)

        await store.record(10, 20, CLASSIC_3)
        outcome = await store.record(10, 20, CODE_2)

        assert outcome.attempt_created is True
        assert [r.codemode for r in await attempts_for(sqlite_database, 20)] == [False, True]

    async def test_new_day_is_a_new_key(self, sqlite_database):
        days = iter([date(2024, 12, 1), date(2024, 12, 2)])
        store = FactStore(sqlite_database, clock=lambda: next(days))

        await store.record(10, 20, CLASSIC_3)
        await store.record(10, 20, CLASSIC_5)

        assert [r.numberofguess for r in await attempts_for(sqlite_database, 20)] == [3, 5]

    async def test_membership_per_server(self, sqlite_database, fixed_clock):
        store = FactStore(sqlite_database, clock=fixed_clock)

        await store.record(10, 20, CLASSIC_3)
        outcome = await store.record(11, 20, CLASSIC_3)

        assert outcome.membership_created is True
        assert outcome.attempt_created is False
        assert await count(sqlite_database, Membership) == 2

    async def test_no_community_writes_nothing(self, sqlite_database, fixed_clock):
        store = FactStore(sqlite_database, clock=fixed_clock)

        outcome = await store.record(None, 20, CLASSIC_3)

        assert outcome.skipped is True
        assert outcome.day is None
        assert await count(sqlite_database, Attempt) == 0
        assert await count(sqlite_database, Membership) == 0

    async def test_database_error_becomes_storage_error(
        self, sqlite_database, fixed_clock, mocker
    ):
        store = FactStore(sqlite_database, clock=fixed_clock)
        mocker.patch.object(
            FactStore,
            "_insert_ignoring_duplicates",
            mocker.AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("locked"))),
        )

        with pytest.raises(StorageError) as exc_info:
            await store.record(10, 20, CLASSIC_3)

        assert exc_info.value.operation == "record progle result"

    async def test_attempts_too_large_for_column_becomes_storage_error(
        self, sqlite_database, fixed_clock
    ):
        # Arrange
        store = FactStore(sqlite_database, clock=fixed_clock)
        huge = GameResult(mode=GameMode.CLASSIC, attempts=10**20)

        # Act
        with pytest.raises(StorageError) as exc_info:
            await store.record(10, 20, huge)

        # Assert
        assert exc_info.value.operation == "record progle result"
        assert isinstance(exc_info.value.__cause__, OverflowError)
        assert await count(sqlite_database, Attempt) == 0
        assert await count(sqlite_database, Membership) == 0

    async def test_concurrent_duplicates_insert_once(self, sqlite_database, fixed_clock):
        # Arrange
        store = FactStore(sqlite_database, clock=fixed_clock)
        results = [GameResult(mode=GameMode.CLASSIC, attempts=n) for n in range(1, 11)]

        # Act
        outcomes = await asyncio.gather(
            *(store.record(10, 20, result) for result in results)
        )

        # Assert
        assert sum(o.attempt_created for o in outcomes) == 1
        assert sum(o.membership_created for o in outcomes) == 1
        assert await count(sqlite_database, Attempt) == 1
        assert await count(sqlite_database, Membership) == 1


@pytest.mark.integration
@pytest.mark.database
class TestAverages:
    async def test_classic_only(self, sqlite_database):
        days = iter([date(2024, 12, 1), date(2024, 12, 2)])
        store = FactStore(sqlite_database, clock=lambda: next(days))
        await store.record(10, 20, CLASSIC_3)
        await store.record(10, 20, CLASSIC_5)

        averages = await store.averages(20)

        assert averages == Averages(classic=4.0, code=None)

    async def test_both_modes(self, sqlite_database, fixed_clock):
        store = FactStore(sqlite_database, clock=fixed_clock)
        await store.record(10, 20, CLASSIC_3)
        await store.record(10, 20, CODE_2)

        assert await store.averages(20) == Averages(classic=3.0, code=2.0)

    async def test_other_people_do_not_count(self, sqlite_database, fixed_clock):
        store = FactStore(sqlite_database, clock=fixed_clock)
        await store.record(10, 99, CLASSIC_5)

        averages = await store.averages(20)

        assert averages.is_empty
