"""
Durable mapping of Discord users to their linked main character.

Snapshot layout (``links.json``)::

    {"<userId>": {"main": "<name>", "personal": {"channelId": "<id>", "messageId": "<id>"}}}

``main`` is dropped on unlink while ``personal`` is kept, so a pinned view
posted earlier can still be found and reused by a later ``/mychars-pin``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, Tuple

from loa_board.board.models import Link, PersonalTarget

from .persist import load_json, parse_id, save_json

logger = logging.getLogger(__name__)


def _link_from_dict(raw: dict) -> Link:
    main = raw.get("main")
    main = main.strip() if isinstance(main, str) and main.strip() else None

    personal = None
    pin = raw.get("personal")
    if isinstance(pin, dict):
        channel_id = parse_id(pin.get("channelId"))
        message_id = parse_id(pin.get("messageId"))
        if channel_id is not None and message_id is not None:
            personal = PersonalTarget(channel_id, message_id)
    return Link(main=main, personal=personal)


def _link_to_dict(link: Link) -> dict:
    out: dict = {}
    if link.main:
        out["main"] = link.main
    if link.personal is not None:
        out["personal"] = {
            "channelId": str(link.personal.channel_id),
            "messageId": str(link.personal.message_id),
        }
    return out


class LinkStore:
    """User -> :class:`Link` mapping with snapshot persistence."""

    def __init__(self, path: str | Path | None = None, links: Dict[int, Link] | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._links: dict[int, Link] = dict(links or {})

    @classmethod
    def load(cls, path: str | Path) -> "LinkStore":
        """Read ``path``; missing or malformed files yield an empty store."""

        raw = load_json(path, {})
        if not isinstance(raw, dict):
            logger.warning("Link store %s is not an object; starting empty", path)
            raw = {}

        links: dict[int, Link] = {}
        for key, value in raw.items():
            user_id = parse_id(key)
            if user_id is None or not isinstance(value, dict):
                logger.warning("Skipping malformed link entry %r", key)
                continue
            links[user_id] = _link_from_dict(value)

        store = cls(path, links)
        logger.info("Loaded %d link(s) from %s", len(store), path)
        return store

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    def link(self, user_id: int, name: str) -> Link:
        current = self._links.get(user_id) or Link()
        current.main = name
        self._links[user_id] = current
        self.save()
        return current

    def unlink(self, user_id: int) -> bool:
        """Clear ``main`` for ``user_id``. Returns ``False`` if nothing was linked."""

        current = self._links.get(user_id)
        if current is None or not current.main:
            return False
        current.main = None
        self.save()
        return True

    def set_personal(self, user_id: int, personal: PersonalTarget | None) -> None:
        current = self._links.get(user_id) or Link()
        current.personal = personal
        self._links[user_id] = current
        self.save()

    def save(self) -> None:
        if self._path is None:
            return
        payload = {str(uid): _link_to_dict(link) for uid, link in self._links.items()}
        err = save_json(self._path, payload)
        if err is not None:
            logger.error("Failed to persist links to %s: %s", self._path, err)

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def get(self, user_id: int) -> Link | None:
        return self._links.get(user_id)

    def items(self) -> list[Tuple[int, Link]]:
        """Snapshot of ``(user_id, link)`` pairs in insertion order."""

        return [(uid, Link(link.main, link.personal)) for uid, link in self._links.items()]

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._links))

    def __len__(self) -> int:
        return len(self._links)
