"""Value types shared by the registry, the link store and the renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class CharacterRecord:
    """One character as reported by the siblings endpoint."""

    name: str
    class_name: str
    server_name: str
    item_level: str

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "CharacterRecord":
        return cls(
            name=str(payload.get("CharacterName") or ""),
            class_name=str(payload.get("CharacterClassName") or ""),
            server_name=str(payload.get("ServerName") or ""),
            item_level=str(payload.get("ItemAvgLevel") or ""),
        )


@dataclass(frozen=True)
class Target:
    """A shared board message. Identity is the (channel, message) pair."""

    channel_id: int
    message_id: int

    @property
    def key(self) -> str:
        return f"{self.channel_id}:{self.message_id}"


@dataclass(frozen=True)
class PersonalTarget:
    """Location of a user's pinned character list."""

    channel_id: int
    message_id: int


@dataclass
class Link:
    """A Discord user's linked main character and optional pinned view."""

    main: str | None = None
    personal: PersonalTarget | None = None


@dataclass(frozen=True)
class BoardRow:
    """A rendered board line: either a representative character or an error."""

    user_id: int
    name: str = ""
    class_name: str = ""
    level_text: str = ""
    level: float = 0.0
    error: str | None = None


__all__ = ["CharacterRecord", "Target", "PersonalTarget", "Link", "BoardRow"]
