"""
Board engine: owns the link store, board registry and provider cache, and
exposes the operations the slash commands call.

Locking
=======
``_state_lock`` serializes every mutation of the link store and registry. A
refresh tick holds it only long enough to take a :class:`BoardSnapshot`, so
commands keep being accepted during a long tick. Two callers hold it for a
long time: ``enable_board`` keeps it across find-or-post-then-register (one
board render, so one ``API_DELAY`` per linked character plus Discord calls),
and ``rescan`` keeps it across the whole guild scan. Neither may interleave
with another registration, so ``/link`` and ``/unlink`` wait until they finish.

``_tick_lock`` allows one tick at a time. A tick requested while another runs
is dropped and :meth:`BoardEngine.run_tick` returns ``None``. A board
unregistered while a tick runs is skipped when the tick reaches it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping

import discord

from loa_board.config import board as board_cfg
from loa_board.config import core as core_cfg
from loa_board.errors import EntityNotFound, NotLinked
from loa_board.memory import LinkStore, ProviderCache, TargetRegistry

from . import scheduler
from .discovery import discover_boards
from .ensure import ensure_board_in_channel
from .models import CharacterRecord, Link, PersonalTarget, Target
from .ranking import sort_by_level
from .refresh import (
    RefreshBookkeeping,
    RefreshReport,
    collect_board_rows,
    refresh_boards,
    refresh_personal,
)
from .render import build_board_embed, build_personal_embed

if TYPE_CHECKING:  # pragma: no cover - type-checking only
    from loa_board.clients.platform import Platform

logger = logging.getLogger(__name__)

LINKS_FILE = "links.json"
BOARDS_FILE = "boards.json"


@dataclass(frozen=True)
class BoardSnapshot:
    """Links, targets and cached payloads as of one moment; boards render from it."""

    links: tuple[tuple[int, Link], ...]
    targets: tuple[Target, ...]
    records: Mapping[str, Any]


class BoardEngine:
    def __init__(
        self,
        platform: "Platform",
        cache: ProviderCache,
        links: LinkStore,
        registry: TargetRegistry,
        *,
        settings: Any = None,
        guild_id: int | None = None,
    ) -> None:
        self.platform = platform
        self.cache = cache
        self.links = links
        self.registry = registry
        self.settings = settings or board_cfg
        self.guild_id = guild_id if guild_id is not None else core_cfg.GUILD_ID

        self.bookkeeping = RefreshBookkeeping()
        self._state_lock = asyncio.Lock()
        self._tick_lock = asyncio.Lock()
        self._ticker: asyncio.Task | None = None

    @classmethod
    def from_config(cls, platform: "Platform", fetch) -> "BoardEngine":
        """Build an engine backed by the configured persist dir and TTL."""

        persist_dir = Path(board_cfg.PERSIST_DIR)
        return cls(
            platform,
            ProviderCache(fetch, board_cfg.CACHE_TTL),
            LinkStore.load(persist_dir / LINKS_FILE),
            TargetRegistry.load(persist_dir / BOARDS_FILE),
        )

    # ------------------------------------------------------------------ #
    # RENDERING
    # ------------------------------------------------------------------ #

    async def build_board(self, snapshot: BoardSnapshot, force: bool = True) -> discord.Embed:
        """Render the shared board from ``snapshot.links``."""

        rows = await collect_board_rows(
            snapshot.links, self.cache, api_delay=self.settings.API_DELAY, force=force
        )
        has_links = any(link.main for _, link in snapshot.links)
        return build_board_embed(rows, tz=self.settings.TIMEZONE, has_links=has_links)

    async def render_board(self, force: bool = True) -> discord.Embed:
        async with self._state_lock:
            snapshot = self.snapshot()
        return await self.build_board(snapshot, force)

    async def render_personal(self, user_id: int, name: str, force: bool = True) -> discord.Embed:
        records = await self.cache.get_siblings(name, force=force)
        return build_personal_embed(user_id, sort_by_level(records), tz=self.settings.TIMEZONE)

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            links=tuple(self.links.items()),
            targets=tuple(self.registry),
            records=self.cache.snapshot(),
        )

    # ------------------------------------------------------------------ #
    # LINKS
    # ------------------------------------------------------------------ #

    async def link(self, user_id: int, name: str) -> list[CharacterRecord]:
        """
        Link ``user_id`` to ``name`` after confirming the character exists.

        :raises EntityNotFound: the API returned no roster for ``name``.
        :raises ProviderError: the API call itself failed.
        """
        name = name.strip()
        if not name:
            raise EntityNotFound(name)

        records = await self.cache.get_siblings(name, force=True)
        if not records:
            raise EntityNotFound(name)

        async with self._state_lock:
            self.links.link(user_id, name)
        logger.info("Linked user %s to %s (%d characters)", user_id, name, len(records))
        return sort_by_level(records)

    async def unlink(self, user_id: int) -> bool:
        async with self._state_lock:
            removed = self.links.unlink(user_id)
        if removed:
            logger.info("Unlinked user %s", user_id)
        return removed

    async def my_characters(self, user_id: int) -> list[CharacterRecord]:
        """The caller's roster, served from the cache when fresh."""

        link = self.links.get(user_id)
        if link is None or not link.main:
            raise NotLinked(user_id)
        records = await self.cache.get_siblings(link.main)
        if not records:
            raise EntityNotFound(link.main)
        return sort_by_level(records)

    async def ensure_personal(self, user_id: int, channel_id: int) -> tuple[Any, bool]:
        """
        Update the user's pinned view in place, or post one in ``channel_id``.

        Returns ``(message, created)``.
        """
        link = self.links.get(user_id)
        if link is None or not link.main:
            raise NotLinked(user_id)

        await self.platform.check_text_channel(channel_id)
        embed = await self.render_personal(user_id, link.main)

        message = None
        pin = link.personal
        if pin is not None:
            try:
                message = await self.platform.fetch_message(pin.channel_id, pin.message_id)
            except Exception as exc:
                logger.info("Previous personal view for user %s is gone: %s", user_id, exc)

        if message is not None and pin is not None:
            await self.platform.edit_message(pin.channel_id, pin.message_id, embed)
            ref, created = pin, False
        else:
            message = await self.platform.send_message(channel_id, embed)
            ref, created = PersonalTarget(channel_id, message.id), True

        async with self._state_lock:
            self.links.set_personal(user_id, ref)
        return message, created

    # ------------------------------------------------------------------ #
    # BOARDS
    # ------------------------------------------------------------------ #

    async def ensure_shared_target(self, channel_id: int) -> Any:
        """Existing or newly posted board message for ``channel_id`` (not registered)."""

        return await ensure_board_in_channel(
            self.platform,
            self.registry,
            channel_id,
            self.render_board,
            scan_limit=self.settings.SCAN_LIMIT,
        )

    async def enable_board(self, channel_id: int) -> tuple[Any, bool]:
        """Ensure a board in ``channel_id`` and register it. Returns ``(message, newly_registered)``."""

        async with self._state_lock:
            message = await ensure_board_in_channel(
                self.platform,
                self.registry,
                channel_id,
                partial(self.build_board, self.snapshot()),
                scan_limit=self.settings.SCAN_LIMIT,
            )
            added = self.registry.add(channel_id, message.id)
        if added:
            logger.info("Registered board %s:%s", channel_id, message.id)
        return message, added

    async def remove_shared_targets(self, channel_id: int) -> int:
        async with self._state_lock:
            for target in self.registry.for_channel(channel_id):
                self.bookkeeping.forget(target.key)
            removed = self.registry.remove_channel(channel_id)
        logger.info("Unregistered %d board(s) in channel %s", removed, channel_id)
        return removed

    async def rescan(self, guild_id: int | None = None) -> int:
        """Scan every text channel of the guild for marked boards."""

        channel_ids = await self.platform.list_text_channels(guild_id or self.guild_id)
        async with self._state_lock:
            return await discover_boards(
                self.platform,
                self.registry,
                channel_ids,
                scan_limit=self.settings.SCAN_LIMIT,
            )

    # ------------------------------------------------------------------ #
    # REFRESH
    # ------------------------------------------------------------------ #

    @property
    def tick_running(self) -> bool:
        return self._tick_lock.locked()

    async def run_tick(self) -> RefreshReport | None:
        """Refresh every board and personal view once. ``None`` if a tick is already running."""

        if self._tick_lock.locked():
            logger.info("Refresh already in progress; skipping trigger")
            return None

        async with self._tick_lock:
            async with self._state_lock:
                snapshot = self.snapshot()

            logger.info(
                "[TICK] managedBoards=%d links=%d", len(snapshot.targets), len(snapshot.links)
            )
            report = RefreshReport()
            await refresh_boards(
                self.platform,
                snapshot.targets,
                partial(self.build_board, snapshot, True),
                edit_delay=self.settings.EDIT_DELAY,
                bookkeeping=self.bookkeeping,
                report=report,
                still_registered=self.registry.__contains__,
            )
            await refresh_personal(
                self.platform,
                snapshot.links,
                self.render_personal,
                edit_delay=self.settings.EDIT_DELAY,
                bookkeeping=self.bookkeeping,
                report=report,
            )
            await self._prune_missing(report)

        logger.info("[TICK] done: %s", report.summary())
        return report

    async def refresh_now(self) -> RefreshReport | None:
        return await self.run_tick()

    async def _prune_missing(self, report: RefreshReport) -> None:
        threshold = self.settings.PRUNE_AFTER_FAILURES
        if threshold <= 0 or not report.missing:
            return
        async with self._state_lock:
            for target in report.missing:
                if self.bookkeeping.missing_streak(target.key) < threshold:
                    continue
                if self.registry.remove(target):
                    self.bookkeeping.forget(target.key)
                    report.pruned.append(target)
                    logger.warning(
                        "Pruned board %s after %d consecutive misses", target.key, threshold
                    )

    # ------------------------------------------------------------------ #
    # LIFECYCLE
    # ------------------------------------------------------------------ #

    async def start(self) -> None:
        """Recover boards from Discord, then start the ticker (first tick runs now)."""

        if self._ticker is not None and not self._ticker.done():
            logger.info("Refresh ticker already running")
            return

        try:
            await self.rescan()
        except Exception:
            logger.exception("Startup board scan failed")

        self._ticker = await scheduler.startup(self.run_tick, self.settings.REFRESH_INTERVAL)

    async def stop(self) -> None:
        """Stop the ticker after any in-flight tick completes."""

        async with self._tick_lock:
            await scheduler.shutdown(self._ticker)
            self._ticker = None


__all__ = ["BoardEngine", "BoardSnapshot", "LINKS_FILE", "BOARDS_FILE"]
