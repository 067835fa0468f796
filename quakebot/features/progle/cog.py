"""
Progle feature cog.

Watches every message for result shares, the ``!hello`` probe and broadcast
relays, and serves ``/averages``. All logic lives in CommandRouter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from quakebot.bot.router import ChatEvent, CommandInvocation, UserRef, split_reply
from quakebot.core.logging.logger import LogContext, get_logger

if TYPE_CHECKING:
    from quakebot.bot.quake_bot import QuakeBot

logger = get_logger(__name__)


class ProgleCog(commands.Cog, name="Progle"):
    def __init__(self, bot: QuakeBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if self.bot.user is not None and message.author.id == self.bot.user.id:
            return

        event = ChatEvent(
            text=message.content,
            author_id=message.author.id,
            community_id=message.guild.id if message.guild else None,
            channel_id=message.channel.id,
        )

        async with LogContext(
            user_id=event.author_id,
            guild_id=event.community_id,
            channel_id=event.channel_id,
            command="on_message",
        ):
            try:
                replies = await self.bot.router.handle_message(event)
            except Exception:
                logger.exception("Unhandled error while handling message")
                return

            for reply in replies:
                try:
                    await message.channel.send(reply)
                except discord.HTTPException as exc:
                    logger.warning(
                        "Failed to send reply",
                        extra={"error": str(exc), "error_type": type(exc).__name__},
                    )

    @app_commands.command(name="averages", description="get your averages for progle")
    @app_commands.describe(user="the user to get the averages of")
    async def averages(
        self,
        interaction: discord.Interaction,
        user: Optional[discord.User] = None,
    ) -> None:
        invocation = CommandInvocation(
            name="averages",
            invoking_user=UserRef(id=interaction.user.id, name=interaction.user.name),
            target_user=UserRef(id=user.id, name=user.name) if user else None,
        )

        async with LogContext(
            user_id=interaction.user.id,
            guild_id=interaction.guild_id,
            channel_id=interaction.channel_id,
            command="/averages",
        ):
            await interaction.response.defer()
            try:
                text = await self.bot.router.route(invocation)
            except Exception:
                logger.exception("averages command failed")
                text = "Something went wrong while fetching averages."

            for chunk in split_reply(text):
                await interaction.followup.send(chunk)


async def setup(bot: QuakeBot) -> None:
    await bot.add_cog(ProgleCog(bot))
