# -*- coding: utf-8 -*-
"""
What the services need from the messaging platform

The Discord adapter in `transbot.bot` implements this; tests use a fake.
"""
from typing import Any, Dict, List, Protocol

from models import InboundMessage, LogEntry, Reply, UserInfo


class PlatformError(Exception):
    """A platform call failed (missing permission, unknown object, network)"""


class ChatPlatform(Protocol):
    async def fetch_member_role_ids(self, guild_id: str, user_id: str) -> List[str]:
        """Live role membership, never cached"""

    async def fetch_guild_name(self, guild_id: str) -> str | None: ...

    async def fetch_channel_name(self, guild_id: str | None, channel_id: str) -> str | None: ...

    async def fetch_role_name(self, guild_id: str, role_id: str) -> str | None: ...

    async def fetch_user(self, user_id: str) -> UserInfo | None: ...

    async def send_reply(self, message: InboundMessage, reply: Reply) -> None: ...

    async def download_attachment(self, url: str) -> bytes: ...

    async def send_log_entry(self, channel_id: str, entry: LogEntry) -> None: ...

    def default_guild_id(self) -> str | None:
        """Any guild the bot is in, used when no guild can be inferred"""

    def bot_status(self) -> Dict[str, Any] | None:
        """`{"tag", "ready"}` once logged in, else None"""
