# -*- coding: utf-8 -*-
"""
Shared fixtures: an in-memory stand-in for Discord, fresh stores and a
provider registry whose HTTP calls are intercepted by respx.
"""
from collections import Counter
from pathlib import Path
from typing import Dict, List

import httpx
import pytest

from models import Attachment, InboundMessage, LogEntry, Reply, UserInfo
from providers import ProviderRegistry
from transbot.container import Services
from transbot.platform import PlatformError
from transbot.services import ConfigStore

OLLAMA_URL = "http://localhost:11434"
OLLAMA_GENERATE = f"{OLLAMA_URL}/api/generate"
OLLAMA_TAGS = f"{OLLAMA_URL}/api/tags"


class FakePlatform:
    """Records every outbound call; lookups are served from plain dicts"""

    def __init__(self):
        self.member_roles: Dict[str, List[str]] = {}
        self.role_error: Exception | None = None
        self.guild_names: Dict[str, str] = {}
        self.channel_names: Dict[str, str] = {}
        self.role_names: Dict[str, str] = {}
        self.users: Dict[str, UserInfo] = {}
        self.files: Dict[str, bytes] = {}
        self.reply_error: Exception | None = None
        self.replies: List[tuple] = []
        self.log_posts: List[tuple] = []
        self.log_error: Exception | None = None
        self.calls: Counter = Counter()

    async def fetch_member_role_ids(self, guild_id: str, user_id: str) -> List[str]:
        self.calls["roles"] += 1
        if self.role_error:
            raise self.role_error
        return self.member_roles.get(user_id, [])

    async def fetch_guild_name(self, guild_id: str) -> str | None:
        self.calls["guild"] += 1
        return self.guild_names.get(guild_id)

    async def fetch_channel_name(self, guild_id: str | None, channel_id: str) -> str | None:
        self.calls["channel"] += 1
        if channel_id not in self.channel_names:
            raise PlatformError(f"Unknown channel {channel_id}")
        return self.channel_names[channel_id]

    async def fetch_role_name(self, guild_id: str, role_id: str) -> str | None:
        self.calls["role"] += 1
        return self.role_names.get(role_id)

    async def fetch_user(self, user_id: str) -> UserInfo | None:
        self.calls["user"] += 1
        return self.users.get(user_id)

    async def send_reply(self, message: InboundMessage, reply: Reply) -> None:
        if self.reply_error:
            raise self.reply_error
        self.replies.append((message, reply))

    async def download_attachment(self, url: str) -> bytes:
        if url not in self.files:
            raise PlatformError(f"Cannot download attachment: {url}")
        return self.files[url]

    async def send_log_entry(self, channel_id: str, entry: LogEntry) -> None:
        if self.log_error:
            raise self.log_error
        self.log_posts.append((channel_id, entry))

    def default_guild_id(self) -> str | None:
        return next(iter(self.guild_names), None)

    def bot_status(self):
        return {"tag": "relay#0001", "ready": True}


def make_message(**overrides) -> InboundMessage:
    fields = dict(
        message_id="m1",
        author_id="u1",
        author_name="alice",
        author_avatar="https://cdn.example/alice.png",
        guild_id="g1",
        channel_id="c1",
        channel_name="general",
        content="Hello",
    )
    fields.update(overrides)
    return InboundMessage(**fields)


def image_attachment(url: str = "https://cdn.example/shot.png") -> Attachment:
    return Attachment(url=url, content_type="image/png", filename="shot.png")


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "translation-config.json"


@pytest.fixture
def store(config_path: Path) -> ConfigStore:
    return ConfigStore(config_path, save_delay=0.05)


@pytest.fixture
def registry() -> ProviderRegistry:
    return ProviderRegistry(client=httpx.AsyncClient())


@pytest.fixture
def services(store: ConfigStore, registry: ProviderRegistry, platform: FakePlatform) -> Services:
    return Services.build(store, registry, platform)
