# -*- coding: utf-8 -*-
"""
Tests for the TTL cache, the ring buffer and the memoized directory lookups
"""
import pytest

from models import UserInfo
from transbot.cache import MISSING, RingBuffer, TtlCache
from transbot.services import DirectoryLookup
from transbot.services.directory_service import UNKNOWN, UNKNOWN_SERVER


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestTtlCache:
    def test_present_before_ttl(self):
        clock = FakeClock()
        cache = TtlCache(ttl=60, clock=clock)
        cache.set("k", "v")

        clock.now += 59.999
        assert cache.get("k") == "v"

    def test_expired_at_exact_ttl(self):
        clock = FakeClock()
        cache = TtlCache(ttl=60, clock=clock)
        cache.set("k", "v")

        clock.now += 60
        assert cache.get("k") is MISSING

    def test_absent_key_returns_default(self):
        cache = TtlCache(ttl=5)
        assert cache.get("nope") is MISSING
        assert cache.get("nope", None) is None

    def test_cached_none_is_a_hit(self):
        cache = TtlCache(ttl=5)
        cache.set("k", None)
        assert cache.get("k") is None
        assert "k" in cache

    def test_overwrite_resets_timer(self):
        clock = FakeClock()
        cache = TtlCache(ttl=10, clock=clock)
        cache.set("k", 1)
        clock.now += 8
        cache.set("k", 2)
        clock.now += 8

        assert cache.get("k") == 2


class TestRingBuffer:
    def test_keeps_latest_items_most_recent_first(self):
        buffer = RingBuffer(capacity=3)
        for i in range(5):
            buffer.push(i)

        assert buffer.latest() == [4, 3, 2]
        assert len(buffer) == 3

    def test_latest_with_limit(self):
        buffer = RingBuffer(capacity=10)
        for i in range(4):
            buffer.push(i)

        assert buffer.latest(2) == [3, 2]
        assert buffer.latest(50) == [3, 2, 1, 0]


class TestDirectoryLookup:
    @pytest.mark.asyncio
    async def test_lookup_is_memoized(self, platform):
        platform.guild_names["g1"] = "Guild One"
        directory = DirectoryLookup(platform, TtlCache(ttl=60))

        assert await directory.guild_name("g1") == "Guild One"
        assert await directory.guild_name("g1") == "Guild One"
        assert platform.calls["guild"] == 1

    @pytest.mark.asyncio
    async def test_failure_is_cached_and_yields_sentinel(self, platform):
        directory = DirectoryLookup(platform, TtlCache(ttl=60))

        assert await directory.channel_label("g1", "missing") == UNKNOWN
        assert await directory.channel_label("g1", "missing") == UNKNOWN
        assert platform.calls["channel"] == 1

    @pytest.mark.asyncio
    async def test_null_result_expires_after_ttl(self, platform):
        clock = FakeClock()
        directory = DirectoryLookup(platform, TtlCache(ttl=60, clock=clock))

        assert await directory.guild_label("g1") == UNKNOWN_SERVER
        platform.guild_names["g1"] = "Guild One"
        assert await directory.guild_label("g1") == UNKNOWN_SERVER

        clock.now += 60
        assert await directory.guild_label("g1") == "Guild One"
        assert platform.calls["guild"] == 2

    @pytest.mark.asyncio
    async def test_user_info(self, platform):
        platform.users["u9"] = UserInfo(username="bob", avatar=None)
        directory = DirectoryLookup(platform, TtlCache(ttl=60))

        info = await directory.user_info("u9")
        assert info.username == "bob"
        assert await directory.user_info("unknown") is None
