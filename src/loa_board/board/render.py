"""
Embed builders for the shared board and personal character lists.

Both embeds put :data:`~loa_board.board.marker.BOARD_TAG` in the footer. Boards
are rediscovered by :mod:`loa_board.board.discovery`; personal views add
:data:`~loa_board.board.marker.PERSONAL_LABEL` so discovery skips them.
"""

from __future__ import annotations

import datetime
from typing import Sequence
from zoneinfo import ZoneInfo

import discord

from .marker import BOARD_TAG, PERSONAL_PREFIX
from .models import BoardRow, CharacterRecord

BOARD_TITLE = "Server roster board (linked members)"
BOARD_COLOR = 0xFFD700
PERSONAL_COLOR = 0x00AE86
EMPTY_BOARD_TEXT = "No members linked yet. Use `/link <character>` to join the board."

# Discord rejects embed descriptions above 4096 characters.
_DESCRIPTION_LIMIT = 4096


def _stamp(now: datetime.datetime | None, tz: str) -> str:
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return now.astimezone(ZoneInfo(tz)).strftime("%Y-%m-%d %H:%M:%S")


def _join_lines(lines: Sequence[str], limit: int = _DESCRIPTION_LIMIT) -> str:
    out: list[str] = []
    used = 0
    for i, line in enumerate(lines):
        extra = len(line) + (1 if out else 0)
        remaining = len(lines) - i
        tail = f"\n… and {remaining} more"
        if used + extra > limit - len(tail):
            out.append(tail.lstrip("\n"))
            break
        out.append(line)
        used += extra
    return "\n".join(out)


def format_row(row: BoardRow) -> str:
    if row.error:
        return f"• **<@{row.user_id}>** — {row.error}"
    return f"• **<@{row.user_id}>** — **{row.name}** ({row.class_name}) | {row.level_text}"


def build_board_embed(
    rows: Sequence[BoardRow],
    *,
    now: datetime.datetime | None = None,
    tz: str = "Asia/Seoul",
    has_links: bool = True,
) -> discord.Embed:
    """Render the shared board. ``rows`` must already be ordered."""

    if not has_links:
        description = EMPTY_BOARD_TEXT
    else:
        description = _join_lines([format_row(r) for r in rows]) or EMPTY_BOARD_TEXT

    embed = discord.Embed(title=BOARD_TITLE, description=description, color=BOARD_COLOR)
    embed.set_footer(text=f"{BOARD_TAG} Last updated: {_stamp(now, tz)}")
    return embed


def build_personal_embed(
    user_id: int,
    records: Sequence[CharacterRecord],
    *,
    now: datetime.datetime | None = None,
    tz: str = "Asia/Seoul",
) -> discord.Embed:
    """Render a user's full roster. ``records`` must already be ordered."""

    header = f"<@{user_id}>\n"
    lines = [
        f"• **{c.name}** ({c.class_name}) — {c.server_name} | Item level {c.item_level}"
        for c in records
    ]
    embed = discord.Embed(
        title="Character list",
        description=header + _join_lines(lines, _DESCRIPTION_LIMIT - len(header)),
        color=PERSONAL_COLOR,
    )
    embed.set_footer(text=f"{PERSONAL_PREFIX} • Last updated: {_stamp(now, tz)}")
    return embed


__all__ = [
    "BOARD_TITLE",
    "EMPTY_BOARD_TEXT",
    "format_row",
    "build_board_embed",
    "build_personal_embed",
]
