"""
Database subsystem for QuakeBot.

Provides the async SQLAlchemy engine, session and transaction management,
and the declarative ORM base for model definitions.
"""

from quakebot.core.database.base import Base
from quakebot.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)

__all__ = [
    # ORM Base
    "Base",
    # Main service
    "DatabaseService",
    # Exceptions
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
]
