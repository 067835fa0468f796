from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column

from quakebot.core.database.base import Base


class Attempt(Base):
    """
    One reported progle score.

    Fields (schema only):
    - person: Discord user ID
    - day: proleptic Gregorian ordinal of the UTC date the score was posted
    - codemode: True for the code variant, False for classic
    - numberofguess: guess count reported that day for that mode

    Primary key is (person, day, codemode): at most one score per person per
    mode per day. The first report wins; rows are never updated.
    """

    __tablename__ = "attempts"

    person: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    day: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
    )

    codemode: Mapped[bool] = mapped_column(
        Boolean,
        primary_key=True,
    )

    numberofguess: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<Attempt person={self.person} day={self.day} "
            f"codemode={self.codemode} numberofguess={self.numberofguess}>"
        )
