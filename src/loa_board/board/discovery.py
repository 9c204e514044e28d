"""
Rebuild the board registry from what is actually posted in Discord.

Only the ``scan_limit`` most recent messages of each channel are inspected;
older boards are found only if they are already registered. Channels that
cannot be read are skipped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from .marker import is_managed_message

if TYPE_CHECKING:  # pragma: no cover - type-checking only
    from loa_board.clients.platform import Platform
    from loa_board.memory.registry import TargetRegistry

logger = logging.getLogger(__name__)


async def discover_boards(
    platform: "Platform",
    registry: "TargetRegistry",
    channel_ids: Iterable[int],
    *,
    scan_limit: int,
) -> int:
    """Register every marked bot message found. Returns the number newly added."""

    bot_user_id = platform.bot_user_id
    found = 0
    scanned = 0
    for channel_id in channel_ids:
        try:
            messages = await platform.fetch_recent_messages(channel_id, scan_limit)
        except Exception as exc:
            logger.warning("Skipping channel %s during board scan: %s", channel_id, exc)
            continue

        scanned += 1
        for message in messages:
            if not is_managed_message(message, bot_user_id):
                continue
            if registry.add(channel_id, message.id):
                found += 1

    logger.info(
        "Board scan: %d new board(s) in %d channel(s) (managed total=%d)",
        found,
        scanned,
        len(registry),
    )
    return found


__all__ = ["discover_boards"]
