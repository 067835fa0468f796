"""Discord bot wiring: handler context, command router, bot class."""

from quakebot.bot.context import BotContext
from quakebot.bot.quake_bot import FEATURE_COGS, QuakeBot
from quakebot.bot.router import (
    ChatEvent,
    CommandInvocation,
    CommandRouter,
    UserRef,
    split_reply,
)

__all__ = [
    "BotContext",
    "ChatEvent",
    "CommandInvocation",
    "CommandRouter",
    "FEATURE_COGS",
    "QuakeBot",
    "UserRef",
    "split_reply",
]
