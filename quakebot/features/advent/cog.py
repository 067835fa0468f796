"""
Advent feature cog: ``/advent`` shows the private leaderboard.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from quakebot.bot.router import CommandInvocation, UserRef, split_reply
from quakebot.core.logging.logger import LogContext, get_logger

if TYPE_CHECKING:
    from quakebot.bot.quake_bot import QuakeBot

logger = get_logger(__name__)


class AdventCog(commands.Cog, name="Advent"):
    def __init__(self, bot: QuakeBot) -> None:
        self.bot = bot

    @app_commands.command(name="advent", description="view advent of code leaderboard")
    async def advent(self, interaction: discord.Interaction) -> None:
        invocation = CommandInvocation(
            name="advent",
            invoking_user=UserRef(id=interaction.user.id, name=interaction.user.name),
        )

        async with LogContext(
            user_id=interaction.user.id,
            guild_id=interaction.guild_id,
            channel_id=interaction.channel_id,
            command="/advent",
        ):
            # The upstream fetch can outlast the 3s interaction window
            await interaction.response.defer()
            try:
                text = await self.bot.router.route(invocation)
            except Exception:
                logger.exception("advent command failed")
                text = "Something went wrong while building the leaderboard."

            for chunk in split_reply(text):
                await interaction.followup.send(chunk)


async def setup(bot: QuakeBot) -> None:
    await bot.add_cog(AdventCog(bot))
