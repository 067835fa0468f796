"""
Command Router

Purpose
-------
Platform-neutral dispatch for inbound chat events and command invocations.
The cogs translate discord.py objects into `ChatEvent` / `CommandInvocation`
and send back whatever text the router returns.

Responsibilities
----------------
- ``!hello`` probe
- Broadcast relay, before result parsing
- Result parsing and recording, best effort
- ``averages`` and ``advent`` commands

Error Handling
--------------
Each event is handled on its own. A storage failure while recording is
logged and produces no reply. Leaderboard failures become a short generic
reply. An unknown command name is a programming error and raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from quakebot.bot.context import BotContext
from quakebot.core.exceptions import StorageError, get_error_severity
from quakebot.core.logging.logger import get_logger
from quakebot.modules.advent.client import AdventClient
from quakebot.modules.advent.service import AdventService
from quakebot.modules.progle.service import Phrasing, ProgleService
from quakebot.modules.relay.service import MailRelay
from quakebot.modules.shared.exceptions import QuakeDomainException, is_transient_error

logger = get_logger(__name__)

HELLO_TRIGGER = "!hello"
HELLO_REPLY = "world!"
RELAY_SENT_REPLY = "Sent email"
RELAY_FAILED_REPLY = "Failed to send email"
FETCH_FAILED_REPLY = "Encountered an error fetching the data"

DISCORD_MESSAGE_LIMIT = 2000


# ============================================================================
# Inbound shapes
# ============================================================================


@dataclass(frozen=True)
class ChatEvent:
    text: str
    author_id: int
    community_id: Optional[int]
    channel_id: int


@dataclass(frozen=True)
class UserRef:
    id: int
    name: str


@dataclass(frozen=True)
class CommandInvocation:
    name: str
    invoking_user: UserRef
    target_user: Optional[UserRef] = None


def split_reply(text: str, limit: int = DISCORD_MESSAGE_LIMIT) -> List[str]:
    """
    Split a reply into chunks no longer than `limit`, breaking on newlines.

    A single line longer than `limit` is hard-split.
    """
    if len(text) <= limit:
        return [text]

    chunks: List[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


# ============================================================================
# CommandRouter
# ============================================================================


class CommandRouter:
    """
    Public Methods
    --------------
    - handle_message() -> replies for one chat message (often none)
    - route() -> reply for one command invocation
    """

    COMMANDS = ("averages", "advent")

    def __init__(
        self,
        progle: ProgleService,
        advent: AdventService,
        relay: MailRelay,
    ) -> None:
        self._progle = progle
        self._advent = advent
        self._relay = relay

    @classmethod
    def from_context(cls, context: BotContext) -> "CommandRouter":
        client = AdventClient(
            url=context.aoc_url,
            token=context.aoc_token,
            timeout_seconds=context.http_timeout_seconds,
        )
        return cls(
            progle=ProgleService(),
            advent=AdventService(client),
            relay=MailRelay(context.relay),
        )

    # ========================================================================
    # Messages
    # ========================================================================

    async def handle_message(self, event: ChatEvent) -> List[str]:
        replies: List[str] = []

        if event.text == HELLO_TRIGGER:
            replies.append(HELLO_REPLY)

        if self._relay.should_relay(event.text):
            sent = await self._relay.relay(event.text)
            replies.append(RELAY_SENT_REPLY if sent else RELAY_FAILED_REPLY)

        try:
            await self._progle.record_message(
                event.community_id, event.author_id, event.text
            )
        except StorageError as exc:
            logger.error(
                "Dropped progle result after storage failure",
                extra={"error": exc.to_dict(), "person": event.author_id},
                exc_info=True,
            )

        return replies

    # ========================================================================
    # Commands
    # ========================================================================

    async def route(self, invocation: CommandInvocation) -> str:
        if invocation.name == "averages":
            return await self._averages(invocation)
        if invocation.name == "advent":
            return await self._leaderboard()
        raise RuntimeError(f"No handler registered for command {invocation.name!r}")

    async def _averages(self, invocation: CommandInvocation) -> str:
        target = invocation.target_user
        if target is None:
            user, phrasing = invocation.invoking_user, Phrasing.for_self()
        else:
            user, phrasing = target, Phrasing.for_member(target.name)

        try:
            return await self._progle.averages_text(user.id, phrasing)
        except StorageError as exc:
            logger.error(
                "Averages query failed",
                extra={"error": exc.to_dict(), "person": user.id},
                exc_info=True,
            )
            return FETCH_FAILED_REPLY

    async def _leaderboard(self) -> str:
        try:
            return await self._advent.leaderboard_text()
        except QuakeDomainException as exc:
            logger.log(
                getattr(logging, get_error_severity(exc).name),
                "Advent leaderboard unavailable",
                extra={"error": exc.to_dict(), "transient": is_transient_error(exc)},
            )
            return FETCH_FAILED_REPLY
