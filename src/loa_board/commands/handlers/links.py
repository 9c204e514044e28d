from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .. import (
    MSG_NOT_LINKED,
    MSG_PROVIDER_FAILED,
    MSG_TEXT_CHANNEL_ONLY,
    get_engine,
    register_cog,
)
from ...board.render import build_personal_embed
from ...errors import EntityNotFound, NotLinked, ProviderError, UnsupportedChannel

logger = logging.getLogger(__name__)


@register_cog
class Links(commands.Cog):
    """
    Character linking and personal roster views.

    ``/link`` validates the name against the API before storing it, ``/mychars``
    answers from the provider cache, and ``/mychars-pin`` posts (or updates) a
    personal view that the refresh ticker keeps current.
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="link", description="Link your main character and show its roster.")
    @app_commands.describe(name="Main character name")
    async def link(self, interaction: discord.Interaction, name: str) -> None:
        engine = get_engine(self.bot)
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            records = await engine.link(interaction.user.id, name)
        except EntityNotFound:
            await interaction.followup.send(f"❌ Could not find character **{name.strip()}**.", ephemeral=True)
            return
        except ProviderError as exc:
            logger.error("link failed for user %s: %s", interaction.user.id, exc)
            await interaction.followup.send(MSG_PROVIDER_FAILED, ephemeral=True)
            return

        embed = build_personal_embed(interaction.user.id, records, tz=engine.settings.TIMEZONE)
        await interaction.followup.send("✅ Main character linked.", embed=embed, ephemeral=True)

    @app_commands.command(name="unlink", description="Unlink your main character.")
    async def unlink(self, interaction: discord.Interaction) -> None:
        removed = await get_engine(self.bot).unlink(interaction.user.id)
        msg = "🔓 Unlinked." if removed else "You have no linked character."
        await interaction.response.send_message(msg, ephemeral=True)

    @app_commands.command(name="mychars", description="Show every character on your account.")
    async def mychars(self, interaction: discord.Interaction) -> None:
        engine = get_engine(self.bot)
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            records = await engine.my_characters(interaction.user.id)
        except NotLinked:
            await interaction.followup.send(MSG_NOT_LINKED, ephemeral=True)
            return
        except (EntityNotFound, ProviderError) as exc:
            logger.error("mychars failed for user %s: %s", interaction.user.id, exc)
            await interaction.followup.send("❌ Could not load your characters.", ephemeral=True)
            return

        embed = build_personal_embed(interaction.user.id, records, tz=engine.settings.TIMEZONE)
        await interaction.followup.send(embed=embed, ephemeral=True)

    @app_commands.command(name="mychars-pin", description="Pin your character list here and keep it updated.")
    @app_commands.guild_only()
    async def mychars_pin(self, interaction: discord.Interaction) -> None:
        engine = get_engine(self.bot)
        link = engine.links.get(interaction.user.id)
        if link is None or not link.main:
            await interaction.response.send_message(MSG_NOT_LINKED, ephemeral=True)
            return

        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            _, created = await engine.ensure_personal(interaction.user.id, interaction.channel_id)
        except UnsupportedChannel:
            await interaction.followup.send(MSG_TEXT_CHANNEL_ONLY, ephemeral=True)
            return
        except Exception:
            logger.exception("mychars-pin failed for user %s", interaction.user.id)
            await interaction.followup.send("❌ Could not pin or update your character list.", ephemeral=True)
            return

        if created:
            msg = "📌 Pinned your character list. It will refresh automatically."
        else:
            msg = "🔄 Updated your pinned character list."
        await interaction.followup.send(msg, ephemeral=True)
