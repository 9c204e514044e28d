import asyncio

from conftest import make_message
from loa_board.board.discovery import discover_boards
from loa_board.board.marker import BOARD_TAG, PERSONAL_PREFIX
from loa_board.board.models import Target
from loa_board.memory.registry import TargetRegistry


def test_unreadable_channel_is_skipped(platform, tmp_path):
    platform.add_channel(1, [make_message(10, footer=f"{BOARD_TAG} Last updated: now")])
    platform.broken.add(2)
    registry = TargetRegistry(tmp_path / "boards.json")

    found = asyncio.run(discover_boards(platform, registry, [1, 2], scan_limit=50))

    assert found == 1
    assert list(registry) == [Target(1, 10)]


def test_only_bot_authored_marked_messages_are_registered(platform, tmp_path):
    platform.add_channel(
        1,
        [
            make_message(13),
            make_message(12, author_id=7, footer=BOARD_TAG),
            make_message(11, footer="some other footer"),
            make_message(10, footer=BOARD_TAG),
        ],
    )
    registry = TargetRegistry(tmp_path / "boards.json")

    assert asyncio.run(discover_boards(platform, registry, [1], scan_limit=50)) == 1
    assert list(registry) == [Target(1, 10)]


def test_rescan_counts_only_new_targets(platform, tmp_path):
    platform.add_channel(1, [make_message(11, footer=BOARD_TAG), make_message(10, footer=BOARD_TAG)])
    registry = TargetRegistry(tmp_path / "boards.json")
    registry.add(1, 10)

    assert asyncio.run(discover_boards(platform, registry, [1], scan_limit=50)) == 1
    assert asyncio.run(discover_boards(platform, registry, [1], scan_limit=50)) == 0
    assert len(registry) == 2


def test_scan_depth_is_bounded(platform, tmp_path):
    old_board = make_message(1, footer=BOARD_TAG)
    chatter = [make_message(100 + i, author_id=7) for i in range(5)]
    platform.add_channel(1, chatter + [old_board])
    registry = TargetRegistry(tmp_path / "boards.json")

    assert asyncio.run(discover_boards(platform, registry, [1], scan_limit=5)) == 0
    assert asyncio.run(discover_boards(platform, registry, [1], scan_limit=6)) == 1


def test_pinned_personal_views_are_not_registered(platform, tmp_path):
    platform.add_channel(
        1,
        [
            make_message(11, footer=f"{PERSONAL_PREFIX} • Last updated: now"),
            make_message(10, footer=f"{BOARD_TAG} Last updated: now"),
        ],
    )
    registry = TargetRegistry(tmp_path / "boards.json")

    assert asyncio.run(discover_boards(platform, registry, [1], scan_limit=50)) == 1
    assert list(registry) == [Target(1, 10)]
