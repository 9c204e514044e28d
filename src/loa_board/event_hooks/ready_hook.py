import logging

import discord

from loa_board.board.engine import BoardEngine

logger = logging.getLogger(__name__)


async def handle(client: discord.Client, engine: BoardEngine):
    """Recover boards and start the refresh ticker on client ready."""
    logger.info(f"Logged in as {client.user.name} (ID: {client.user.id})")

    # on_ready fires again after reconnects; the engine ignores repeat starts.
    logger.info(
        "Managing %d board(s) and %d link(s) from persisted state",
        len(engine.registry),
        len(engine.links),
    )
    await engine.start()
