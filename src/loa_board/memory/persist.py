"""
Best-effort JSON snapshots for the link store and board registry.

Both stores keep their state in memory and write a snapshot after every
mutation so a restart can pick up where the process left off. The on-disk copy
is never authoritative:

* :func:`load_json` returns ``fallback`` when the file is missing or cannot be
  decoded, logging the reason.
* :func:`save_json` writes through a temp file and :func:`os.replace`, and
  *returns* any :class:`OSError` instead of raising; callers log it.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def load_json(path: str | Path, fallback: Any) -> Any:
    p = Path(path)
    if not p.exists():
        return fallback
    try:
        with p.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable state file %s: %s", p, exc)
        return fallback


def save_json(path: str | Path, obj: Any) -> OSError | None:
    p = Path(path)
    tmp = p.with_suffix(p.suffix + ".tmp")
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(obj, f, ensure_ascii=False, indent=2)
        # Readers never observe a half-written file.
        os.replace(tmp, p)
    except OSError as exc:
        return exc
    return None


def parse_id(raw: Any) -> int | None:
    """Coerce a stored snowflake (string or int) back to ``int``."""

    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


__all__ = ["load_json", "save_json", "parse_id"]
