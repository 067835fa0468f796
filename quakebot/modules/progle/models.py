"""
Value types for progle results.

These are plain frozen dataclasses, never persisted directly; the ORM rows
live in `quakebot.database.models`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class GameMode(Enum):
    """Which progle variant a result belongs to."""

    CLASSIC = "classic"
    CODE = "code"

    @property
    def is_code(self) -> bool:
        return self is GameMode.CODE


@dataclass(frozen=True)
class GameResult:
    """One parsed progle share message."""

    mode: GameMode
    attempts: int


@dataclass(frozen=True)
class RecordOutcome:
    """
    What `FactStore.record()` did.

    `skipped` is True when there was no server to attribute the result to;
    in that case nothing was written and `day` is None.
    """

    skipped: bool
    membership_created: bool = False
    attempt_created: bool = False
    day: Optional[int] = None

    @classmethod
    def no_community(cls) -> "RecordOutcome":
        return cls(skipped=True)


@dataclass(frozen=True)
class Averages:
    """Mean guess count per mode; None where the person has no scores."""

    classic: Optional[float] = None
    code: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.classic is None and self.code is None
