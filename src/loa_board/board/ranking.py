"""Item level parsing and ordering."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from .models import BoardRow, CharacterRecord

_LEADING_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)")


def level_value(raw: object) -> float:
    """
    Parse an item level such as ``"1,630.00"`` into ``1630.0``.

    Thousands separators are stripped and the leading numeric prefix is used;
    anything without one (``"abc"``, ``""``, ``None``) is ``0.0``.
    """
    if raw is None:
        return 0.0
    text = str(raw).replace(",", "")
    match = _LEADING_NUMBER_RE.match(text)
    if not match:
        return 0.0
    return float(match.group(0))


def pick_representative(records: Sequence[CharacterRecord]) -> CharacterRecord | None:
    """Highest item level wins; the earliest record wins ties."""

    if not records:
        return None
    return max(records, key=lambda r: level_value(r.item_level))


def sort_by_level(records: Iterable[CharacterRecord]) -> list[CharacterRecord]:
    return sorted(records, key=lambda r: level_value(r.item_level), reverse=True)


def sort_rows(rows: Iterable[BoardRow]) -> list[BoardRow]:
    # Error rows carry level 0 and sink below every parsed level.
    return sorted(rows, key=lambda r: r.level, reverse=True)


__all__ = ["level_value", "pick_representative", "sort_by_level", "sort_rows"]
