from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .. import MSG_TEXT_CHANNEL_ONLY, get_engine, register_cog
from ...errors import UnsupportedChannel

logger = logging.getLogger(__name__)


@register_cog
class Boards(commands.Cog):
    """Shared board management: enable, disable, refresh and rescan."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="board-enable", description="Post (or reuse) this channel's board and keep it updated.")
    @app_commands.guild_only()
    async def board_enable(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            await get_engine(self.bot).enable_board(interaction.channel_id)
        except UnsupportedChannel:
            await interaction.followup.send(MSG_TEXT_CHANNEL_ONLY, ephemeral=True)
            return
        except Exception:
            logger.exception("board-enable failed in channel %s", interaction.channel_id)
            await interaction.followup.send("❌ Could not create or register the board.", ephemeral=True)
            return

        await interaction.followup.send(
            "📌 This channel's board is now refreshed automatically.", ephemeral=True
        )

    @app_commands.command(name="board-disable", description="Stop managing this channel's board (the message is kept).")
    @app_commands.guild_only()
    async def board_disable(self, interaction: discord.Interaction) -> None:
        removed = await get_engine(self.bot).remove_shared_targets(interaction.channel_id)
        if removed:
            msg = "🧹 Stopped managing this channel's board."
        else:
            msg = "ℹ️ This channel has no registered board."
        await interaction.response.send_message(msg, ephemeral=True)

    @app_commands.command(name="board-refresh", description="Refresh every board and pinned list now.")
    @app_commands.guild_only()
    async def board_refresh(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            report = await get_engine(self.bot).refresh_now()
        except Exception:
            logger.exception("board-refresh failed")
            await interaction.followup.send("❌ Refresh failed.", ephemeral=True)
            return

        if report is None:
            await interaction.followup.send("⏳ A refresh is already running.", ephemeral=True)
            return
        await interaction.followup.send(f"🔄 Refreshed: {report.summary()}.", ephemeral=True)

    @app_commands.command(name="board-scan", description="Find and register existing boards in every channel.")
    @app_commands.guild_only()
    async def board_scan(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            found = await get_engine(self.bot).rescan(interaction.guild_id)
        except Exception:
            logger.exception("board-scan failed in guild %s", interaction.guild_id)
            await interaction.followup.send("❌ Scan failed.", ephemeral=True)
            return

        await interaction.followup.send(f"🔎 Scan complete: registered {found} board(s).", ephemeral=True)
