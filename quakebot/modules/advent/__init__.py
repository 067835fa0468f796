"""
Advent of Code private leaderboard: fetch, score, render.
"""

from quakebot.modules.advent.client import AdventClient
from quakebot.modules.advent.models import (
    LeaderboardSnapshot,
    MemberProgress,
    parse_snapshot,
    parse_snapshot_text,
)
from quakebot.modules.advent.service import (
    AdventService,
    LeaderboardEntry,
    generate_scores,
    progress_bar,
    render_leaderboard,
)

__all__ = [
    "AdventClient",
    "AdventService",
    "LeaderboardEntry",
    "LeaderboardSnapshot",
    "MemberProgress",
    "generate_scores",
    "parse_snapshot",
    "parse_snapshot_text",
    "progress_bar",
    "render_leaderboard",
]
