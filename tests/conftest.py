import os, sys
from pathlib import Path
from types import SimpleNamespace
from urllib.parse import unquote

import pytest

# Add src/ to sys.path for imports without an editable install
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Required settings for loa_board.config
os.environ.setdefault("DISCORD_API_TOKEN", "test-token")
os.environ.setdefault("LOSTARK_API_KEY", "test-lostark")
os.environ.setdefault("GUILD_ID", "777")
os.environ.setdefault("PORT", "0")

from loa_board.errors import ProviderError, TargetMissing, UnsupportedChannel  # noqa: E402

BOT_ID = 42


def make_message(mid, *, author_id=BOT_ID, footer=None):
    embeds = []
    if footer is not None:
        embeds = [SimpleNamespace(footer=SimpleNamespace(text=footer))]
    return SimpleNamespace(id=mid, author=SimpleNamespace(id=author_id), embeds=embeds)


class FakePlatform:
    """In-memory Discord: channels hold messages newest-first."""

    def __init__(self, bot_user_id=BOT_ID):
        self.bot_user_id = bot_user_id
        self.channels = {}
        self.broken = set()
        self.non_text = set()
        self.fail_edit = set()
        self.sent = []
        self.edits = []
        self.fetches = []
        self._next_id = 1000

    def add_channel(self, cid, messages=()):
        self.channels[cid] = list(messages)

    def _check(self, cid):
        if cid in self.non_text:
            raise UnsupportedChannel(cid)
        if cid in self.broken:
            raise RuntimeError(f"Missing Access for channel {cid}")
        if cid not in self.channels:
            raise TargetMissing(cid)

    async def check_text_channel(self, cid):
        self._check(cid)

    async def fetch_recent_messages(self, cid, limit):
        self._check(cid)
        return list(self.channels[cid])[:limit]

    async def fetch_message(self, cid, mid):
        self._check(cid)
        self.fetches.append((cid, mid))
        for m in self.channels[cid]:
            if m.id == mid:
                return m
        raise TargetMissing(cid, mid)

    async def send_message(self, cid, embed):
        self._check(cid)
        self._next_id += 1
        msg = SimpleNamespace(id=self._next_id, author=SimpleNamespace(id=self.bot_user_id), embeds=[embed])
        self.channels[cid].insert(0, msg)
        self.sent.append((cid, msg.id))
        return msg

    async def edit_message(self, cid, mid, embed):
        msg = await self.fetch_message(cid, mid)
        if (cid, mid) in self.fail_edit:
            raise RuntimeError("503 Service Unavailable")
        msg.embeds = [embed]
        self.edits.append((cid, mid))

    async def list_text_channels(self, guild_id):
        return list(self.channels) + sorted(self.broken)


def roster(*chars):
    """``roster(("Foo", "Bard", "Luperon", "1,600.00"), ...)`` -> API payload."""

    return [
        {"CharacterName": n, "CharacterClassName": c, "ServerName": s, "ItemAvgLevel": lvl}
        for n, c, s, lvl in chars
    ]


class FakeProvider:
    """Stands in for ``LostArkClient.get_json`` keyed by character name."""

    def __init__(self, rosters=None):
        self.rosters = dict(rosters or {})
        self.failing = set()
        self.calls = []

    async def get_json(self, path):
        self.calls.append(path)
        name = unquote(path.split("/")[2])
        if name in self.failing:
            raise ProviderError(path, 503)
        return self.rosters.get(name)

    def calls_for(self, name):
        return [p for p in self.calls if unquote(p.split("/")[2]) == name]


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def settings(tmp_path):
    return SimpleNamespace(
        REFRESH_INTERVAL=60.0,
        CACHE_TTL=30.0,
        API_DELAY=0,
        EDIT_DELAY=0,
        SCAN_LIMIT=50,
        PERSIST_DIR=str(tmp_path),
        TIMEZONE="UTC",
        PRUNE_AFTER_FAILURES=0,
    )


@pytest.fixture
def make_engine(platform, provider, settings, tmp_path):
    from loa_board.board.engine import BoardEngine
    from loa_board.memory import LinkStore, ProviderCache, TargetRegistry

    def _make(**overrides):
        for key, value in overrides.items():
            setattr(settings, key, value)
        return BoardEngine(
            platform,
            ProviderCache(provider.get_json, settings.CACHE_TTL),
            LinkStore.load(tmp_path / "links.json"),
            TargetRegistry.load(tmp_path / "boards.json"),
            settings=settings,
            guild_id=777,
        )

    return _make
