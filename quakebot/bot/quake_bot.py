"""
QuakeBot - Main Bot Class

Purpose
-------
discord.py `commands.Bot` subclass that owns the command router and loads
the feature cogs.

Responsibilities
----------------
- Configure gateway intents (message content is required for result parsing)
- Load the feature cogs in `setup_hook`
- Register the ``averages`` and ``advent`` slash commands in every guild on ready

Non-Responsibilities
--------------------
- Infrastructure startup (see quakebot.main)
- Parsing, storage, scoring (see quakebot.modules)
"""

from __future__ import annotations

import time
from typing import List

import discord
from discord.ext import commands

from quakebot.bot.context import BotContext
from quakebot.bot.router import CommandRouter
from quakebot.core.logging.logger import LogContext, get_logger

logger = get_logger(__name__)

FEATURE_COGS: List[str] = [
    "quakebot.features.progle.cog",
    "quakebot.features.advent.cog",
]


class QuakeBot(commands.Bot):
    """
    Dependencies (Injected):
    - context: immutable handler settings
    - router: optional prebuilt CommandRouter, built from `context` otherwise
    """

    def __init__(self, context: BotContext, router: CommandRouter | None = None) -> None:
        self.context = context
        self.router = router or CommandRouter.from_context(context)

        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        logger.debug("QuakeBot initialized")

    # --------------------------------------------------------------- #
    # Startup
    # --------------------------------------------------------------- #

    async def setup_hook(self) -> None:
        start = time.perf_counter()
        logger.info("=" * 60)
        logger.info("QUAKEBOT SETUP")
        logger.info("=" * 60)

        for extension in FEATURE_COGS:
            await self.load_extension(extension)
            logger.info("✓ Loaded %s", extension)

        logger.info(
            "✓ Bot setup complete (%.2fms)", (time.perf_counter() - start) * 1000
        )

    async def on_ready(self) -> None:
        logger.info("=" * 60)
        logger.info("Bot is ONLINE as %s", self.user)
        logger.info("Guilds: %d", len(self.guilds))
        logger.info("=" * 60)

        await self.register_commands()

    async def register_commands(self) -> int:
        """
        Sync the slash commands into every guild the bot is in.

        A failure in one guild is logged and the rest still sync.
        Returns the number of guilds that synced.
        """
        synced = 0
        for guild in self.guilds:
            with LogContext(guild_id=guild.id, operation="register_commands"):
                self.tree.copy_global_to(guild=guild)
                try:
                    commands_synced = await self.tree.sync(guild=guild)
                except discord.HTTPException as exc:
                    logger.error(
                        "Failed to register commands in guild",
                        extra={"error": str(exc), "error_type": type(exc).__name__},
                    )
                    continue

                synced += 1
                logger.info(
                    "Registered commands in guild",
                    extra={"commands": [c.name for c in commands_synced]},
                )
        return synced

    # --------------------------------------------------------------- #
    # Shutdown
    # --------------------------------------------------------------- #

    async def close(self) -> None:
        logger.info("QuakeBot closing gateway connection")
        await super().close()
