# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/12 09:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Memoized name resolution for guilds, channels, roles and users
"""
from typing import Awaitable, Callable, Hashable, TypeVar

from loguru import logger

from models import UserInfo
from settings import settings
from transbot.cache import TtlCache, MISSING
from transbot.platform import ChatPlatform

T = TypeVar("T")

UNKNOWN = "Unknown"
UNKNOWN_SERVER = "Unknown Server"


class DirectoryLookup:
    """
    Cache-aside reads over the platform directory

    Every lookup is memoized for the cache ttl, including misses and failures,
    so a broken id does not hit the platform on every message. Failures are
    never raised: callers get `None` and pick their own sentinel.
    """

    def __init__(self, platform: ChatPlatform, cache: TtlCache | None = None):
        self._platform = platform
        self._cache = cache or TtlCache(ttl=settings.DIRECTORY_CACHE_TTL)

    async def _cached(self, key: Hashable, fetch: Callable[[], Awaitable[T]]) -> T | None:
        hit = self._cache.get(key)
        if hit is not MISSING:
            return hit

        try:
            value = await fetch()
        except Exception as err:
            logger.debug(f"Directory lookup {key} failed: {err!r}")
            value = None

        self._cache.set(key, value)
        return value

    async def guild_name(self, guild_id: str | None) -> str | None:
        if not guild_id:
            return None
        return await self._cached(
            ("guild", guild_id), lambda: self._platform.fetch_guild_name(guild_id)
        )

    async def channel_name(self, guild_id: str | None, channel_id: str) -> str | None:
        return await self._cached(
            ("channel", guild_id, channel_id),
            lambda: self._platform.fetch_channel_name(guild_id, channel_id),
        )

    async def role_name(self, guild_id: str | None, role_id: str) -> str | None:
        if not guild_id:
            return None
        return await self._cached(
            ("role", guild_id, role_id), lambda: self._platform.fetch_role_name(guild_id, role_id)
        )

    async def user_info(self, user_id: str) -> UserInfo | None:
        return await self._cached(("user", user_id), lambda: self._platform.fetch_user(user_id))

    async def guild_label(self, guild_id: str | None) -> str:
        return await self.guild_name(guild_id) or UNKNOWN_SERVER

    async def channel_label(self, guild_id: str | None, channel_id: str) -> str:
        return await self.channel_name(guild_id, channel_id) or UNKNOWN
