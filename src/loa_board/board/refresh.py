"""
The work done by one refresh tick.

Every loop here is strictly sequential with a fixed sleep before each external
step, which caps the request rate towards both Discord and the Lost Ark API.
Failures are contained to the smallest unit (one character fetch, one board,
one personal view) so a single bad target never aborts the pass.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Sequence, Tuple

import discord

from loa_board.errors import TargetMissing

from .models import BoardRow, CharacterRecord, Link, Target
from .ranking import level_value, pick_representative, sort_rows

if TYPE_CHECKING:  # pragma: no cover - type-checking only
    from loa_board.clients.platform import Platform
    from loa_board.memory.provider_cache import ProviderCache

logger = logging.getLogger(__name__)


@dataclass
class RefreshReport:
    """Outcome of one tick."""

    boards_attempted: int = 0
    boards_updated: int = 0
    personal_attempted: int = 0
    personal_updated: int = 0
    missing: list[Target] = field(default_factory=list)
    pruned: list[Target] = field(default_factory=list)

    @property
    def boards_failed(self) -> int:
        return self.boards_attempted - self.boards_updated

    @property
    def personal_failed(self) -> int:
        return self.personal_attempted - self.personal_updated

    def summary(self) -> str:
        text = (
            f"boards {self.boards_updated}/{self.boards_attempted}, "
            f"personal {self.personal_updated}/{self.personal_attempted}"
        )
        if self.pruned:
            text += f", pruned {len(self.pruned)}"
        return text


class RefreshBookkeeping:
    """Per-target last success time and consecutive "message gone" streak."""

    def __init__(self) -> None:
        self._last_ok: dict[str, datetime.datetime] = {}
        self._missing: dict[str, int] = {}

    def record_success(self, key: str) -> None:
        self._last_ok[key] = datetime.datetime.now(datetime.timezone.utc)
        self._missing.pop(key, None)

    def record_missing(self, key: str) -> int:
        self._missing[key] = self._missing.get(key, 0) + 1
        return self._missing[key]

    def missing_streak(self, key: str) -> int:
        return self._missing.get(key, 0)

    def last_refreshed(self, key: str) -> datetime.datetime | None:
        return self._last_ok.get(key)

    def forget(self, key: str) -> None:
        self._last_ok.pop(key, None)
        self._missing.pop(key, None)


async def collect_board_rows(
    links: Sequence[Tuple[int, Link]],
    cache: "ProviderCache",
    *,
    api_delay: float,
    force: bool = True,
) -> list[BoardRow]:
    """
    Build one ordered row per linked user.

    Each distinct character is fetched once per call, waiting ``api_delay``
    before every fetch. Users whose roster cannot be fetched keep an explicit
    error row so the board always lists every linked member.
    """
    fetched: dict[str, list[CharacterRecord] | Exception] = {}
    rows: list[BoardRow] = []

    for user_id, link in links:
        name = link.main
        if not name:
            continue

        if name not in fetched:
            await asyncio.sleep(api_delay)
            try:
                fetched[name] = await cache.get_siblings(name, force=force)
            except Exception as exc:
                logger.warning("Roster fetch failed for %s (user %s): %s", name, user_id, exc)
                fetched[name] = exc

        result = fetched[name]
        if isinstance(result, Exception):
            rows.append(BoardRow(user_id, error=f"{name}: ❌ error"))
            continue

        best = pick_representative(result)
        if best is None:
            rows.append(BoardRow(user_id, error=f"{name}: ❌ lookup failed"))
            continue

        rows.append(
            BoardRow(
                user_id,
                name=best.name,
                class_name=best.class_name,
                level_text=best.item_level,
                level=level_value(best.item_level),
            )
        )

    return sort_rows(rows)


async def refresh_boards(
    platform: "Platform",
    targets: Sequence[Target],
    render: Callable[[], Awaitable[discord.Embed]],
    *,
    edit_delay: float,
    bookkeeping: RefreshBookkeeping,
    report: RefreshReport,
    still_registered: Callable[[Target], bool] | None = None,
) -> None:
    """
    Edit each of ``targets`` with a fresh render.

    ``still_registered`` is checked right before each target so a board
    unregistered while the pass runs is left alone.
    """
    logger.info("[REFRESH_ALL] count=%d", len(targets))
    for target in targets:
        await asyncio.sleep(edit_delay)
        if still_registered is not None and not still_registered(target):
            logger.info("Skipping board %s: unregistered during refresh", target.key)
            continue
        report.boards_attempted += 1
        try:
            await platform.fetch_message(target.channel_id, target.message_id)
            embed = await render()
            await platform.edit_message(target.channel_id, target.message_id, embed)
        except TargetMissing as exc:
            streak = bookkeeping.record_missing(target.key)
            report.missing.append(target)
            logger.error("[EDIT FAIL] %s (missing %d time(s) in a row)", exc, streak)
            continue
        except Exception:
            logger.exception("[EDIT FAIL] board %s", target.key)
            continue

        bookkeeping.record_success(target.key)
        report.boards_updated += 1


async def refresh_personal(
    platform: "Platform",
    links: Sequence[Tuple[int, Link]],
    render: Callable[[int, str], Awaitable[discord.Embed]],
    *,
    edit_delay: float,
    bookkeeping: RefreshBookkeeping,
    report: RefreshReport,
) -> None:
    for user_id, link in links:
        pin = link.personal
        if pin is None or not link.main:
            continue

        await asyncio.sleep(edit_delay)
        report.personal_attempted += 1
        try:
            await platform.fetch_message(pin.channel_id, pin.message_id)
            embed = await render(user_id, link.main)
            await platform.edit_message(pin.channel_id, pin.message_id, embed)
        except TargetMissing as exc:
            logger.error("[EDIT FAIL personal] user %s: %s", user_id, exc)
            continue
        except Exception:
            logger.exception("[EDIT FAIL personal] user %s", user_id)
            continue

        bookkeeping.record_success(f"personal:{user_id}")
        report.personal_updated += 1
        logger.info("[EDIT OK personal] user %s %s/%s", user_id, pin.channel_id, pin.message_id)


__all__ = [
    "RefreshReport",
    "RefreshBookkeeping",
    "collect_board_rows",
    "refresh_boards",
    "refresh_personal",
]
