"""
Recognize board messages this bot posted, without any registry state.

Every embed we render carries :data:`BOARD_TAG` in its footer. Personal views
follow the tag with :data:`PERSONAL_LABEL`; they belong to a user's link and
must never be picked up as a shared board. Together with the author check
this is how boards are rediscovered after the registry file is lost. All
predicates are pure so they can run against fixture payloads.
"""

from __future__ import annotations

from typing import Any

BOARD_TAG = "[LOA_BOARD]"
PERSONAL_LABEL = "Personal"
PERSONAL_PREFIX = f"{BOARD_TAG} {PERSONAL_LABEL}"


def _footer_text(message: Any) -> str | None:
    embeds = getattr(message, "embeds", None) or []
    if not embeds:
        return None
    footer = getattr(embeds[0], "footer", None)
    return getattr(footer, "text", None)


def has_board_marker(message: Any) -> bool:
    """Return ``True`` if the first embed's footer text contains the tag."""

    text = _footer_text(message)
    return bool(text) and BOARD_TAG in text


def is_personal_view(message: Any) -> bool:
    """``True`` for a user's pinned character list."""

    text = _footer_text(message)
    return bool(text) and text.startswith(PERSONAL_PREFIX)


def is_managed_message(message: Any, bot_user_id: int | None) -> bool:
    """A shared board: authored by the bot, tagged, and not a personal view."""

    if bot_user_id is None:
        return False
    author = getattr(message, "author", None)
    if getattr(author, "id", None) != bot_user_id:
        return False
    return has_board_marker(message) and not is_personal_view(message)


__all__ = [
    "BOARD_TAG",
    "PERSONAL_LABEL",
    "PERSONAL_PREFIX",
    "has_board_marker",
    "is_personal_view",
    "is_managed_message",
]
