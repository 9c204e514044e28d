from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from .. import register_cog


@register_cog
class Help(commands.Cog):
    """List available slash commands."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="help", description="List the board bot's slash commands.")
    async def help(self, interaction: discord.Interaction) -> None:
        """Send each registered command with its description to the caller."""

        cmds = sorted(self.bot.tree.get_commands(), key=lambda c: c.name)
        if not cmds:
            listing = "None registered"
        else:
            listing = "\n".join(
                f"`/{c.name}` — {getattr(c, 'description', '')}" for c in cmds
            )
        await interaction.response.send_message(
            f"Available commands:\n{listing}", ephemeral=True
        )
