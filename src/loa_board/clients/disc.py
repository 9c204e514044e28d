"""Discord bot bootstrap utilities."""

from __future__ import annotations

import logging

import discord
from discord.ext import commands as discord_commands

from loa_board import commands as lb_commands
from loa_board.board.engine import BoardEngine
from loa_board.config import core
from loa_board.event_hooks import ready_hook

from . import health
from .lostark import LostArkClient
from .platform import DiscordPlatform

logger = logging.getLogger(__name__)

# --- Intents --------------------------------------------------------------- #
# Guilds + guild messages are enough to read back our own embeds.
intents = discord.Intents.default()


class LoaBot(discord_commands.Bot):
    """Board bot: slash commands plus the refresh engine."""

    def __init__(self) -> None:
        super().__init__(command_prefix=discord_commands.when_mentioned, intents=intents)
        self.provider = LostArkClient()
        self.engine = BoardEngine.from_config(DiscordPlatform(self), self.provider.get_json)
        self._health_runner = None

    async def setup_hook(self) -> None:
        """Register slash commands, sync them to the home guild, open the liveness port."""

        await lb_commands.setup(self)

        guild = discord.Object(id=core.GUILD_ID)
        self.tree.copy_global_to(guild=guild)
        try:
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d application command(s) to guild %s", len(synced), core.GUILD_ID)
        except Exception:
            logger.exception("Failed to sync application commands")

        try:
            self._health_runner = await health.start(core.PORT)
        except OSError:
            logger.exception("Could not start liveness endpoint on port %s", core.PORT)

    async def close(self) -> None:
        await self.engine.stop()
        await self.provider.close()
        await health.stop(self._health_runner)
        await super().close()


bot = LoaBot()


@bot.event
async def on_ready() -> None:
    await ready_hook.handle(bot, bot.engine)


def run() -> None:
    """Start the Discord bot using configuration from the environment."""

    if not core.DISCORD_API_TOKEN:
        logger.error("No DISCORD_API_TOKEN configured. Cannot run client.")
        return

    try:
        bot.run(core.DISCORD_API_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        logger.error("Login failed: %s", exc)
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected error while running client: %s", exc)
