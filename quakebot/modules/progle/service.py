"""
Progle Service
==============

Purpose
-------
Turn chat text into recorded progle facts, and facts into the averages
sentence shown by the ``/averages`` command.

Domain
------
- Parse a message and record it when it is a result
- Format per-mode averages for the invoking user or a named member

Pure business logic: no Discord imports. Storage failures surface as
`StorageError` and are the caller's to log.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from quakebot.core.logging.logger import get_logger
from quakebot.modules.progle import grammar
from quakebot.modules.progle.models import Averages, RecordOutcome
from quakebot.modules.progle.repository import FactStore

logger = get_logger(__name__)


# ============================================================================
# Averages phrasing
# ============================================================================


@dataclass(frozen=True)
class Phrasing:
    """Opening words of the averages sentence, positive and negative."""

    intro: str
    negative: str

    @classmethod
    def for_self(cls) -> "Phrasing":
        return cls(intro="you have", negative="you haven't")

    @classmethod
    def for_member(cls, name: str) -> "Phrasing":
        return cls(intro=f"{name} has", negative=f"{name} hasn't")


def format_average(value: float) -> str:
    """``4.0`` renders as ``4``; anything else keeps full precision."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def render_averages(averages: Averages, phrasing: Phrasing) -> str:
    classic, code = averages.classic, averages.code

    if classic is not None and code is not None:
        return (
            f"{phrasing.intro} an average of {format_average(classic)} "
            f"of classic and {format_average(code)} for code"
        )
    if classic is not None:
        return f"{phrasing.intro} an average of {format_average(classic)} of classic"
    if code is not None:
        return f"{phrasing.intro} an average of {format_average(code)} of codemode"
    return f"{phrasing.negative} sent any progle scores yet"


# ============================================================================
# ProgleService
# ============================================================================


class ProgleService:
    """
    Record results and answer averages queries.

    Public Methods
    --------------
    - record_message() -> parse and record one chat message
    - averages_text() -> averages sentence for one person
    """

    def __init__(self, store: Optional[FactStore] = None) -> None:
        self._store = store or FactStore()

    async def record_message(
        self,
        community_id: Optional[int],
        user_id: int,
        text: str,
    ) -> Optional[RecordOutcome]:
        """
        Record `text` if it is a progle result.

        Returns None on a parse miss, which is the usual case.

        Raises:
            StorageError: If the result parsed but could not be stored.
        """
        result = grammar.parse(text)
        if result is None:
            return None

        logger.debug(
            "Progle result parsed",
            extra={"mode": result.mode.value, "attempts": result.attempts},
        )
        return await self._store.record(community_id, user_id, result)

    async def averages_text(self, user_id: int, phrasing: Phrasing) -> str:
        """
        Raises:
            StorageError: If the averages query fails.
        """
        averages = await self._store.averages(user_id)
        return render_averages(averages, phrasing)
