from __future__ import annotations

from sqlalchemy import BigInteger
from sqlalchemy.orm import Mapped, mapped_column

from quakebot.core.database.base import Base


class Membership(Base):
    """
    A person seen posting a result in a server.

    Fields (schema only):
    - server: Discord guild ID
    - person: Discord user ID

    The composite primary key is the uniqueness invariant; rows are
    inserted once and never updated or deleted.
    """

    __tablename__ = "membership"

    server: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    person: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    def __repr__(self) -> str:
        return f"<Membership server={self.server} person={self.person}>"
