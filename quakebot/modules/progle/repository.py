"""
FactStore - progle fact persistence

Purpose
-------
Sole writer of the `membership` and `attempts` tables, and the read side
for per-person averages.

Responsibilities
----------------
- Record a parsed result at most once per (person, day, mode)
- Record a (server, person) membership at most once
- Compute per-mode average guess counts in SQL

Non-Responsibilities
--------------------
- Parsing (see grammar.py)
- Reply text (see service.py)
- Retries: a failed record is abandoned

Architecture Notes
------------------
Idempotence comes from the composite primary keys plus a dialect-native
``INSERT ... ON CONFLICT DO NOTHING``. There is no read-then-write window,
so two concurrent reports for the same key cannot both insert. ``RETURNING``
tells us whether this call created the row.

Both inserts of one `record()` share a single `DatabaseService.get_transaction()`.
Any `SQLAlchemyError` (or a bind-time `OverflowError` for integers the
driver cannot store) is re-raised as `StorageError`.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional, Sequence, Type

from sqlalchemy import Float, cast, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quakebot.core.database.service import DatabaseService
from quakebot.core.exceptions import StorageError
from quakebot.core.logging.logger import get_logger
from quakebot.database.models import Attempt, Membership
from quakebot.modules.progle.models import Averages, GameResult, RecordOutcome

logger = get_logger(__name__)

_INSERT_BY_DIALECT: Dict[str, Callable[..., Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def day_number(on: date) -> int:
    """Days since 0001-01-01 (which is day 1)."""
    return on.toordinal()


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class FactStore:
    """
    Idempotent persistence for progle facts.

    Public Methods
    --------------
    - record() -> write membership + attempt for one result
    - averages() -> mean guess count per mode for one person
    """

    def __init__(
        self,
        database_service: Type[DatabaseService] = DatabaseService,
        clock: Callable[[], date] = utc_today,
    ) -> None:
        self._db = database_service
        self._clock = clock

    # ========================================================================
    # WRITE OPERATIONS
    # ========================================================================

    async def record(
        self,
        community_id: Optional[int],
        user_id: int,
        result: GameResult,
    ) -> RecordOutcome:
        """
        Record one parsed result.

        Args:
            community_id: Guild the message was posted in; None for DMs
            user_id: Author of the message
            result: Parsed progle result

        Returns:
            RecordOutcome describing which rows were created. A missing
            community_id yields a skipped outcome and no writes.

        Raises:
            StorageError: If the database rejected either insert, including an
                attempts value too large for the column. Nothing
                from this call is committed in that case.
        """
        if community_id is None:
            logger.debug(
                "No community for progle result; not recording",
                extra={"user_id": user_id},
            )
            return RecordOutcome.no_community()

        day = day_number(self._clock())

        try:
            async with self._db.get_transaction() as session:
                membership_created = await self._insert_ignoring_duplicates(
                    session,
                    Membership,
                    {"server": community_id, "person": user_id},
                    index_elements=("server", "person"),
                )
                attempt_created = await self._insert_ignoring_duplicates(
                    session,
                    Attempt,
                    {
                        "person": user_id,
                        "day": day,
                        "codemode": result.mode.is_code,
                        "numberofguess": result.attempts,
                    },
                    index_elements=("person", "day", "codemode"),
                )
        except (SQLAlchemyError, OverflowError) as exc:
            # sqlite3 rejects out-of-range integers at bind time with OverflowError
            raise StorageError("record progle result", exc) from exc

        outcome = RecordOutcome(
            skipped=False,
            membership_created=membership_created,
            attempt_created=attempt_created,
            day=day,
        )

        logger.info(
            "Progle result recorded",
            extra={
                "server": community_id,
                "person": user_id,
                "day": day,
                "mode": result.mode.value,
                "attempts": result.attempts,
                "membership_created": membership_created,
                "attempt_created": attempt_created,
            },
        )

        return outcome

    @staticmethod
    async def _insert_ignoring_duplicates(
        session: AsyncSession,
        model: Type[Any],
        values: Dict[str, Any],
        index_elements: Sequence[str],
    ) -> bool:
        """Insert one row unless its key exists. True if a row was created."""
        dialect = session.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise NotImplementedError(
                f"Conflict-ignoring insert is not available for dialect {dialect!r}"
            )

        key_column = getattr(model, index_elements[0])
        stmt = (
            insert(model)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(index_elements))
            .returning(key_column)
        )
        result = await session.execute(stmt)
        return result.first() is not None

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def averages(self, user_id: int) -> Averages:
        """
        Mean guess count per mode for one person.

        This is a **read-only** operation using get_session().

        Raises:
            StorageError: If the query fails.
        """
        stmt = (
            select(
                Attempt.codemode,
                func.avg(cast(Attempt.numberofguess, Float)),
            )
            .where(Attempt.person == user_id)
            .group_by(Attempt.codemode)
        )

        try:
            async with self._db.get_session() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as exc:
            raise StorageError("query progle averages", exc) from exc

        by_mode = {bool(codemode): float(avg) for codemode, avg in rows if avg is not None}

        logger.debug(
            "Progle averages computed",
            extra={"person": user_id, "modes": len(by_mode)},
        )

        return Averages(classic=by_mode.get(False), code=by_mode.get(True))
