"""
Durable set of shared board messages.

``TargetRegistry`` keeps registration order in a list and mirrors it with a
key index so :meth:`add` is an add-if-absent and the list can never hold two
entries for the same ``(channel_id, message_id)``. Every mutation writes the
``boards.json`` snapshot::

    [{"channelId": "<id>", "messageId": "<id>"}, ...]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List

from loa_board.board.models import Target

from .persist import load_json, parse_id, save_json

logger = logging.getLogger(__name__)


class TargetRegistry:
    """Registry of board targets with snapshot persistence."""

    def __init__(self, path: str | Path | None = None, targets: List[Target] | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._targets: list[Target] = []
        self._index: set[str] = set()
        for target in targets or []:
            if target.key not in self._index:
                self._targets.append(target)
                self._index.add(target.key)

    @classmethod
    def load(cls, path: str | Path) -> "TargetRegistry":
        """Read ``path``; missing or malformed files yield an empty registry."""

        raw = load_json(path, [])
        if not isinstance(raw, list):
            logger.warning("Board registry %s is not a list; starting empty", path)
            raw = []

        targets: list[Target] = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            channel_id = parse_id(entry.get("channelId"))
            message_id = parse_id(entry.get("messageId"))
            if channel_id is None or message_id is None:
                logger.warning("Skipping malformed board entry %r", entry)
                continue
            targets.append(Target(channel_id, message_id))

        registry = cls(path, targets)
        logger.info("Loaded %d board target(s) from %s", len(registry), path)
        return registry

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    def add(self, channel_id: int, message_id: int) -> bool:
        """Register a target unless already present. Returns ``True`` if added."""

        target = Target(channel_id, message_id)
        if target.key in self._index:
            return False
        self._targets.append(target)
        self._index.add(target.key)
        self.save()
        return True

    def remove(self, target: Target) -> bool:
        if target.key not in self._index:
            return False
        self._targets = [t for t in self._targets if t.key != target.key]
        self._index.discard(target.key)
        self.save()
        return True

    def remove_channel(self, channel_id: int) -> int:
        """Unregister every target in ``channel_id``. Returns how many were removed."""

        before = len(self._targets)
        self._targets = [t for t in self._targets if t.channel_id != channel_id]
        self._index = {t.key for t in self._targets}
        removed = before - len(self._targets)
        if removed:
            self.save()
        return removed

    def save(self) -> None:
        if self._path is None:
            return
        payload = [
            {"channelId": str(t.channel_id), "messageId": str(t.message_id)}
            for t in self._targets
        ]
        err = save_json(self._path, payload)
        if err is not None:
            logger.error("Failed to persist board registry to %s: %s", self._path, err)

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def for_channel(self, channel_id: int) -> list[Target]:
        return [t for t in self._targets if t.channel_id == channel_id]

    def __contains__(self, target: object) -> bool:
        return isinstance(target, Target) and target.key in self._index

    def __iter__(self) -> Iterator[Target]:
        # Iterate a copy so callers may mutate the registry mid-loop.
        return iter(list(self._targets))

    def __len__(self) -> int:
        return len(self._targets)
