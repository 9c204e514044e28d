import asyncio
import json

from conftest import make_message, roster
from loa_board.board.marker import BOARD_TAG
from loa_board.board.models import Link, PersonalTarget, Target
from loa_board.board.refresh import collect_board_rows
from loa_board.board.render import build_board_embed
from loa_board.memory.provider_cache import ProviderCache


FOO = roster(("Foo", "Bard", "Luperon", "1,600.00"), ("FooAlt", "Sorceress", "Luperon", "1,550.00"))
BAR = roster(("Bar", "Berserker", "Azena", "1,630.00"))


def _board(mid):
    return make_message(mid, footer=f"{BOARD_TAG} Last updated: earlier")


def test_board_rows_rank_by_level_and_keep_error_rows(provider):
    provider.rosters.update({"Foo": FOO, "Bar": BAR, "Junk": roster(("Junk", "Bard", "Azena", "abc"))})
    provider.failing.add("Broken")
    cache = ProviderCache(provider.get_json, ttl=30)
    links = [
        (1, Link("Foo")),
        (2, Link("Broken")),
        (3, Link("Bar")),
        (4, Link("Ghost")),
        (5, Link(None, PersonalTarget(9, 9))),
        (6, Link("Junk")),
    ]

    rows = asyncio.run(collect_board_rows(links, cache, api_delay=0))

    assert [r.user_id for r in rows] == [3, 1, 2, 4, 6]
    assert rows[0].name == "Bar" and rows[0].level_text == "1,630.00"
    assert rows[1].name == "Foo" and rows[1].level == 1600.0
    assert rows[2].error == "Broken: ❌ error"
    assert rows[3].error == "Ghost: ❌ lookup failed"
    assert rows[4].name == "Junk" and rows[4].level == 0.0

    text = build_board_embed(rows, tz="UTC").description.splitlines()
    assert text[0] == "• **<@3>** — **Bar** (Berserker) | 1,630.00"
    assert text[2] == "• **<@2>** — Broken: ❌ error"


def test_board_rows_fetch_each_character_once_and_always_bypass_cache(provider):
    provider.rosters["Foo"] = FOO
    cache = ProviderCache(provider.get_json, ttl=30)

    async def scenario():
        await cache.get_siblings("Foo")
        await collect_board_rows([(1, Link("Foo")), (2, Link("Foo"))], cache, api_delay=0)

    asyncio.run(scenario())
    assert len(provider.calls_for("Foo")) == 2


def test_tick_isolates_failing_targets(platform, provider, make_engine):
    provider.rosters["Foo"] = FOO
    platform.add_channel(1, [_board(10)])
    platform.add_channel(2, [])  # message 20 was deleted
    platform.broken.add(3)
    platform.add_channel(4, [_board(40)])
    platform.add_channel(5, [_board(50)])
    platform.fail_edit.add((4, 40))

    engine = make_engine()
    engine.links.link(1, "Foo")
    for cid in (1, 2, 3, 4, 5):
        engine.registry.add(cid, cid * 10)

    report = asyncio.run(engine.run_tick())

    assert report.boards_attempted == 5
    assert report.boards_updated == 2
    assert report.boards_failed == 3
    assert platform.edits == [(1, 10), (5, 50)]
    assert [t.message_id for t in report.missing] == [20]
    # Nothing is pruned by default.
    assert len(engine.registry) == 5
    assert engine.bookkeeping.last_refreshed("5:50") is not None
    assert engine.bookkeeping.last_refreshed("2:20") is None


def test_tick_refreshes_personal_views_of_linked_users_only(platform, provider, make_engine):
    provider.rosters.update({"Foo": FOO, "Bar": BAR})
    platform.add_channel(7, [make_message(71), make_message(72), make_message(73)])

    engine = make_engine()
    engine.links.link(1, "Foo")
    engine.links.set_personal(1, PersonalTarget(7, 71))
    engine.links.link(2, "Bar")
    engine.links.set_personal(2, PersonalTarget(7, 99))  # deleted
    engine.links.link(3, "Bar")
    engine.links.set_personal(3, PersonalTarget(7, 73))
    engine.links.unlink(3)
    engine.links.link(4, "Foo")
    engine.links.set_personal(4, PersonalTarget(7, 72))

    report = asyncio.run(engine.run_tick())

    assert report.personal_attempted == 3
    assert report.personal_updated == 2
    assert platform.edits == [(7, 71), (7, 72)]
    assert "Foo" in platform.channels[7][0].embeds[0].description


def test_tick_forces_live_provider_reads(platform, provider, make_engine):
    provider.rosters["Foo"] = FOO
    platform.add_channel(1, [_board(10)])
    platform.add_channel(2, [_board(20)])

    engine = make_engine()
    engine.links.link(1, "Foo")
    engine.registry.add(1, 10)
    engine.registry.add(2, 20)

    async def scenario():
        await engine.cache.get_siblings("Foo")
        await engine.run_tick()

    asyncio.run(scenario())
    # one warm-up read plus a forced read per board
    assert len(provider.calls_for("Foo")) == 3


def test_trigger_during_running_tick_is_a_noop(platform, provider, make_engine):
    provider.rosters.update({"Foo": FOO, "Bar": BAR})
    platform.add_channel(1, [_board(10)])
    engine = make_engine()
    engine.links.link(1, "Foo")
    engine.registry.add(1, 10)

    gate = asyncio.Event()
    original_fetch = platform.fetch_message

    async def slow_fetch(cid, mid):
        await gate.wait()
        return await original_fetch(cid, mid)

    platform.fetch_message = slow_fetch

    async def scenario():
        first = asyncio.create_task(engine.run_tick())
        await asyncio.sleep(0)
        assert engine.tick_running

        skipped = await engine.refresh_now()
        # Commands are still accepted while the tick waits on Discord.
        await engine.link(2, "Bar")

        gate.set()
        report = await first
        return skipped, report

    skipped, report = asyncio.run(scenario())
    assert skipped is None
    assert report.boards_updated == 1
    assert engine.tick_running is False
    assert engine.links.get(2).main == "Bar"


def test_prune_policy_drops_targets_after_consecutive_misses(platform, provider, make_engine, tmp_path):
    provider.rosters["Foo"] = FOO
    platform.add_channel(1, [_board(10)])
    platform.add_channel(2, [])

    engine = make_engine(PRUNE_AFTER_FAILURES=2)
    engine.links.link(1, "Foo")
    engine.registry.add(1, 10)
    engine.registry.add(2, 20)

    async def scenario():
        first = await engine.run_tick()
        second = await engine.run_tick()
        return first, second

    first, second = asyncio.run(scenario())

    assert first.pruned == []
    assert second.pruned == [Target(2, 20)]
    assert list(engine.registry) == [Target(1, 10)]
    saved = json.loads((tmp_path / "boards.json").read_text(encoding="utf-8"))
    assert saved == [{"channelId": "1", "messageId": "10"}]


def test_prune_streak_resets_after_success(platform, provider, make_engine):
    provider.rosters["Foo"] = FOO
    platform.add_channel(2, [])

    engine = make_engine(PRUNE_AFTER_FAILURES=2)
    engine.links.link(1, "Foo")
    engine.registry.add(2, 20)

    async def scenario():
        await engine.run_tick()
        platform.channels[2].append(_board(20))
        await engine.run_tick()
        platform.channels[2].clear()
        return await engine.run_tick()

    report = asyncio.run(scenario())
    assert report.pruned == []
    assert engine.bookkeeping.missing_streak("2:20") == 1
    assert len(engine.registry) == 1


def test_board_disabled_mid_tick_is_not_edited(platform, provider, make_engine):
    provider.rosters["Foo"] = FOO
    platform.add_channel(1, [_board(10)])
    platform.add_channel(2, [_board(20)])
    engine = make_engine()
    engine.links.link(1, "Foo")
    engine.registry.add(1, 10)
    engine.registry.add(2, 20)

    original_fetch = platform.fetch_message

    async def fetch_then_disable(cid, mid):
        if cid == 1:
            await engine.remove_shared_targets(2)
        return await original_fetch(cid, mid)

    platform.fetch_message = fetch_then_disable

    report = asyncio.run(engine.run_tick())

    assert report.boards_attempted == 1
    assert report.boards_updated == 1
    assert platform.edits == [(1, 10)]
    assert list(engine.registry) == [Target(1, 10)]
