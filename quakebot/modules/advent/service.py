"""
Advent Leaderboard Service
==========================

Purpose
-------
Derive scores and progress bars from a leaderboard snapshot and render the
``/advent`` reply.

Domain
------
- score = max(local_score, 1) * max(days completed, 1); a missing
  local_score counts as 1
- entries sorted by score, highest first; equal scores keep snapshot order
- a 15-slot progress bar measured against a fixed 25-day event

Everything is recomputed from each fresh snapshot; nothing is cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from quakebot.core.logging.logger import get_logger
from quakebot.modules.advent.client import AdventClient
from quakebot.modules.advent.models import LeaderboardSnapshot, MemberProgress

logger = get_logger(__name__)

BAR_SLOTS = 15
EVENT_DAYS = 25
COMPLETE_SLOT = "🟩"
INCOMPLETE_SLOT = "🟥"
EMPTY_LEADERBOARD = "No members on the leaderboard yet"


@dataclass(frozen=True)
class LeaderboardEntry:
    username: str
    score: int
    stars: int
    days: int


def score_member(member: MemberProgress) -> LeaderboardEntry:
    local_score = member.local_score if member.local_score is not None else 1
    score = max(local_score, 1) * max(member.days_completed, 1)
    return LeaderboardEntry(
        username=member.display_name,
        score=score,
        stars=member.stars,
        days=member.days_completed,
    )


def generate_scores(snapshot: LeaderboardSnapshot) -> List[LeaderboardEntry]:
    """Score every member and sort descending. The sort is stable."""
    entries = [score_member(member) for member in snapshot.members]
    return sorted(entries, key=lambda entry: entry.score, reverse=True)


def progress_bar(days: int) -> str:
    # ceil(days * 15 / 25) in integer arithmetic
    complete = -(-max(days, 0) * BAR_SLOTS // EVENT_DAYS)
    complete = min(complete, BAR_SLOTS)
    return COMPLETE_SLOT * complete + INCOMPLETE_SLOT * (BAR_SLOTS - complete)


def render_entry(rank: int, entry: LeaderboardEntry) -> str:
    return (
        f"{rank}. {entry.username} who has score {entry.score} "
        f"and {entry.stars} stars\n{progress_bar(entry.days)}"
    )


def render_leaderboard(entries: List[LeaderboardEntry]) -> str:
    if not entries:
        return EMPTY_LEADERBOARD
    return "\n".join(
        render_entry(rank, entry) for rank, entry in enumerate(entries, start=1)
    )


class AdventService:
    """
    Fetch the current snapshot and render it.

    Public Methods
    --------------
    - leaderboard_text() -> rendered ``/advent`` reply
    """

    def __init__(self, client: AdventClient) -> None:
        self._client = client

    async def leaderboard_text(self) -> str:
        """
        Raises:
            UpstreamFetchError: If the leaderboard could not be fetched.
            MalformedUpstreamDataError: If the document has the wrong shape.
        """
        snapshot = await self._client.fetch_snapshot()
        entries = generate_scores(snapshot)

        logger.info(
            "Advent leaderboard rendered",
            extra={
                "members": len(entries),
                "top_score": entries[0].score if entries else None,
            },
        )

        return render_leaderboard(entries)
