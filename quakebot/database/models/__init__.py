"""
Database Models Package
========================

SQLAlchemy ORM models for the facts QuakeBot records.

- Schema only, no business logic
- `Mapped[]` syntax with `mapped_column()`
- Composite primary keys carry the at-most-one-row invariants

Tables
------
- membership: (server, person) pairs seen posting a result
- attempts: one guess count per (person, day, codemode)
"""

from quakebot.core.database.base import Base

from .attempt import Attempt
from .membership import Membership

__all__ = [
    "Base",
    "Attempt",
    "Membership",
]
