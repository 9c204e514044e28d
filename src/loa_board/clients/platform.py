"""
Discord operations the board engine needs, behind a small protocol.

The engine only talks to :class:`Platform`; :class:`DiscordPlatform` is the
production implementation over a :class:`discord.Client`. Unknown channels and
messages surface as :class:`~loa_board.errors.TargetMissing` and non-text
channels as :class:`~loa_board.errors.UnsupportedChannel`; everything else
(``discord.Forbidden``, ``discord.HTTPException``) propagates unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import discord

from loa_board.errors import TargetMissing, UnsupportedChannel

logger = logging.getLogger(__name__)


class Platform(Protocol):
    @property
    def bot_user_id(self) -> int | None: ...

    async def check_text_channel(self, channel_id: int) -> None: ...

    async def fetch_recent_messages(self, channel_id: int, limit: int) -> list[Any]: ...

    async def fetch_message(self, channel_id: int, message_id: int) -> Any: ...

    async def send_message(self, channel_id: int, embed: discord.Embed) -> Any: ...

    async def edit_message(self, channel_id: int, message_id: int, embed: discord.Embed) -> None: ...

    async def list_text_channels(self, guild_id: int) -> list[int]: ...


class DiscordPlatform:
    """:class:`Platform` backed by a live discord.py client."""

    def __init__(self, client: discord.Client) -> None:
        self._client = client

    @property
    def bot_user_id(self) -> int | None:
        user = self._client.user
        return user.id if user is not None else None

    async def _text_channel(self, channel_id: int) -> discord.TextChannel:
        channel = self._client.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self._client.fetch_channel(channel_id)
            except discord.NotFound as exc:
                raise TargetMissing(channel_id) from exc
        if not isinstance(channel, discord.TextChannel):
            raise UnsupportedChannel(channel_id)
        return channel

    async def check_text_channel(self, channel_id: int) -> None:
        await self._text_channel(channel_id)

    async def fetch_recent_messages(self, channel_id: int, limit: int) -> list[discord.Message]:
        channel = await self._text_channel(channel_id)
        return [message async for message in channel.history(limit=limit)]

    async def fetch_message(self, channel_id: int, message_id: int) -> discord.Message:
        channel = await self._text_channel(channel_id)
        try:
            return await channel.fetch_message(message_id)
        except discord.NotFound as exc:
            raise TargetMissing(channel_id, message_id) from exc

    async def send_message(self, channel_id: int, embed: discord.Embed) -> discord.Message:
        channel = await self._text_channel(channel_id)
        return await channel.send(embed=embed)

    async def edit_message(self, channel_id: int, message_id: int, embed: discord.Embed) -> None:
        channel = await self._text_channel(channel_id)
        try:
            await channel.get_partial_message(message_id).edit(embed=embed)
        except discord.NotFound as exc:
            raise TargetMissing(channel_id, message_id) from exc

    async def list_text_channels(self, guild_id: int) -> list[int]:
        guild = self._client.get_guild(guild_id) or await self._client.fetch_guild(guild_id)
        channels = await guild.fetch_channels()
        return [c.id for c in channels if isinstance(c, discord.TextChannel)]


__all__ = ["Platform", "DiscordPlatform"]
