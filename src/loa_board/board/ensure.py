from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable

import discord

from .marker import is_managed_message

if TYPE_CHECKING:  # pragma: no cover - type-checking only
    from loa_board.clients.platform import Platform
    from loa_board.memory.registry import TargetRegistry

logger = logging.getLogger(__name__)


async def ensure_board_in_channel(
    platform: "Platform",
    registry: "TargetRegistry",
    channel_id: int,
    render: Callable[[], Awaitable[discord.Embed]],
    *,
    scan_limit: int,
) -> Any:
    """
    Return the board message for ``channel_id``, posting one only if none exists.

    Resolution order, first hit wins:

    1. a registered target in this channel whose message still resolves;
    2. a recent bot message carrying the board marker;
    3. a freshly rendered message.

    The result is not registered here; callers add it to ``registry``.
    """

    await platform.check_text_channel(channel_id)

    for target in registry.for_channel(channel_id):
        try:
            existing = await platform.fetch_message(channel_id, target.message_id)
        except Exception as exc:
            logger.info("Registered board %s is gone: %s", target.key, exc)
            continue
        logger.info("Reusing registered board %s", target.key)
        return existing

    try:
        recent = await platform.fetch_recent_messages(channel_id, scan_limit)
    except Exception as exc:
        logger.warning("Could not scan channel %s for an existing board: %s", channel_id, exc)
        recent = []

    bot_user_id = platform.bot_user_id
    for message in recent:
        if is_managed_message(message, bot_user_id):
            logger.info("Reusing marked board message %s in channel %s", message.id, channel_id)
            return message

    embed = await render()
    message = await platform.send_message(channel_id, embed)
    logger.info("Posted new board message %s in channel %s", message.id, channel_id)
    return message


__all__ = ["ensure_board_in_channel"]
