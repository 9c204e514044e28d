"""Exceptions raised by the board engine and its clients."""

from __future__ import annotations


class BoardError(Exception):
    """Base class for every error the engine reports to the command layer."""


class ProviderError(BoardError):
    """The Lost Ark API call failed (transport error or non-2xx status)."""

    def __init__(self, path: str, status: int | None = None, detail: str = "") -> None:
        self.path = path
        self.status = status
        self.detail = detail
        label = f"HTTP {status}" if status is not None else "request failed"
        super().__init__(f"{label} for {path}" + (f": {detail}" if detail else ""))


class EntityNotFound(BoardError):
    """The provider knows no character with the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Character {name!r} not found")


class NotLinked(BoardError):
    """The user has no linked character."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} has no linked character")


class UnsupportedChannel(BoardError):
    """Boards can only live in guild text channels."""

    def __init__(self, channel_id: int) -> None:
        self.channel_id = channel_id
        super().__init__(f"Channel {channel_id} is not a guild text channel")


class TargetMissing(BoardError):
    """A channel or message we manage can no longer be resolved."""

    def __init__(self, channel_id: int, message_id: int | None = None) -> None:
        self.channel_id = channel_id
        self.message_id = message_id
        what = f"message {message_id} in channel {channel_id}" if message_id else f"channel {channel_id}"
        super().__init__(f"{what} not found")


__all__ = [
    "BoardError",
    "ProviderError",
    "EntityNotFound",
    "NotLinked",
    "UnsupportedChannel",
    "TargetMissing",
]
