"""
Advent of Code private leaderboard snapshot.

The upstream document looks like::

    {"members": {"<id>": {"name": "...", "local_score": 12, "stars": 4,
                          "completion_day_level": {"1": {...}, "2": {...}}}}}

`parse_snapshot()` validates that shape and keeps member order as it appears
in the document. Anything unexpected raises `MalformedUpstreamDataError`;
there is no partial result.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from quakebot.modules.shared.exceptions import MalformedUpstreamDataError


@dataclass(frozen=True)
class MemberProgress:
    """One leaderboard member as reported upstream."""

    member_id: str
    name: Optional[str]
    local_score: Optional[int]
    stars: int
    days_completed: int

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"(anonymous user #{self.member_id})"


@dataclass(frozen=True)
class LeaderboardSnapshot:
    members: List[MemberProgress]


def _optional_int(member_id: str, field: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    # bool is an int subclass; true/false is not a score
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedUpstreamDataError(
            f"member {member_id}: {field} must be an integer, got {type(value).__name__}"
        )
    return value


def _parse_member(member_id: str, raw: Any) -> MemberProgress:
    if not isinstance(raw, Mapping):
        raise MalformedUpstreamDataError(f"member {member_id} is not an object")

    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        raise MalformedUpstreamDataError(f"member {member_id}: name must be a string")

    completion = raw.get("completion_day_level")
    if not isinstance(completion, Mapping):
        raise MalformedUpstreamDataError(
            f"member {member_id}: completion_day_level must be an object"
        )

    return MemberProgress(
        member_id=str(member_id),
        name=name,
        local_score=_optional_int(member_id, "local_score", raw.get("local_score")),
        stars=_optional_int(member_id, "stars", raw.get("stars")) or 0,
        days_completed=len(completion),
    )


def parse_snapshot(payload: Any) -> LeaderboardSnapshot:
    """Validate a decoded JSON document and build a snapshot."""
    if not isinstance(payload, Mapping):
        raise MalformedUpstreamDataError("document is not an object")

    members = payload.get("members")
    if not isinstance(members, Mapping):
        raise MalformedUpstreamDataError("members must be an object")

    return LeaderboardSnapshot(
        members=[_parse_member(member_id, raw) for member_id, raw in members.items()]
    )


def parse_snapshot_text(body: str) -> LeaderboardSnapshot:
    """Decode a response body and build a snapshot."""
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise MalformedUpstreamDataError(f"body is not valid JSON ({exc.msg})") from exc
    return parse_snapshot(payload)
