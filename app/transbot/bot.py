# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/13 18:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Discord client and the platform adapter the services talk to
"""
from typing import Any, Dict, List

import discord
from discord import app_commands
from httpx import AsyncClient, HTTPError
from loguru import logger

from models import InboundMessage, LogEntry, Reply, UserInfo
from providers import ProviderRegistry
from settings import settings
from transbot.container import Services
from transbot.embeds import log_embed, reply_embed
from transbot.handlers import TranslateGroup, handle_message
from transbot.platform import PlatformError
from transbot.services import ConfigStore

DOWNLOAD_TIMEOUT = 30


def _snowflake(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as err:
        raise PlatformError(f"Invalid Discord id: {value!r}") from err


class DiscordPlatform:
    """`ChatPlatform` over a discord.py client"""

    def __init__(self, client: discord.Client, http: AsyncClient | None = None):
        self._client = client
        self._http = http or AsyncClient(timeout=DOWNLOAD_TIMEOUT, follow_redirects=True)

    async def _guild(self, guild_id: str) -> discord.Guild:
        snowflake = _snowflake(guild_id)
        if guild := self._client.get_guild(snowflake):
            return guild
        try:
            return await self._client.fetch_guild(snowflake)
        except discord.HTTPException as err:
            raise PlatformError(f"Cannot fetch guild {guild_id}: {err}") from err

    async def _channel(self, channel_id: str):
        snowflake = _snowflake(channel_id)
        if channel := self._client.get_channel(snowflake):
            return channel
        try:
            return await self._client.fetch_channel(snowflake)
        except discord.HTTPException as err:
            raise PlatformError(f"Cannot fetch channel {channel_id}: {err}") from err

    async def fetch_member_role_ids(self, guild_id: str, user_id: str) -> List[str]:
        guild = await self._guild(guild_id)
        try:
            member = await guild.fetch_member(_snowflake(user_id))
        except discord.HTTPException as err:
            raise PlatformError(f"Cannot fetch member {user_id}: {err}") from err
        return [str(role.id) for role in member.roles]

    async def fetch_guild_name(self, guild_id: str) -> str | None:
        guild = self._client.get_guild(_snowflake(guild_id))
        return guild.name if guild else None

    async def fetch_channel_name(self, guild_id: str | None, channel_id: str) -> str | None:
        channel = await self._channel(channel_id)
        return getattr(channel, "name", None)

    async def fetch_role_name(self, guild_id: str, role_id: str) -> str | None:
        guild = await self._guild(guild_id)
        snowflake = _snowflake(role_id)
        if role := guild.get_role(snowflake):
            return role.name
        try:
            roles = await guild.fetch_roles()
        except discord.HTTPException as err:
            raise PlatformError(f"Cannot fetch roles of {guild_id}: {err}") from err
        return next((r.name for r in roles if r.id == snowflake), None)

    async def fetch_user(self, user_id: str) -> UserInfo | None:
        snowflake = _snowflake(user_id)
        user = self._client.get_user(snowflake)
        if user is None:
            try:
                user = await self._client.fetch_user(snowflake)
            except discord.HTTPException as err:
                raise PlatformError(f"Cannot fetch user {user_id}: {err}") from err
        return UserInfo(username=str(user), avatar=user.display_avatar.with_size(32).url)

    async def send_reply(self, message: InboundMessage, reply: Reply) -> None:
        embed = reply_embed(reply)
        try:
            if isinstance(message.raw, discord.Message):
                await message.raw.reply(embed=embed)
            else:
                channel = await self._channel(message.channel_id)
                await channel.send(embed=embed)
        except discord.HTTPException as err:
            raise PlatformError(f"Cannot send reply: {err}") from err

    async def download_attachment(self, url: str) -> bytes:
        try:
            response = await self._http.get(url)
            response.raise_for_status()
        except HTTPError as err:
            raise PlatformError(f"Cannot download attachment: {err}") from err
        return response.content

    async def send_log_entry(self, channel_id: str, entry: LogEntry) -> None:
        channel = await self._channel(channel_id)
        try:
            await channel.send(embed=log_embed(entry))
        except discord.HTTPException as err:
            raise PlatformError(f"Cannot post to log channel {channel_id}: {err}") from err

    def default_guild_id(self) -> str | None:
        guilds = self._client.guilds
        return str(guilds[0].id) if guilds else None

    def bot_status(self) -> Dict[str, Any] | None:
        if self._client.user is None:
            return None
        return {"tag": str(self._client.user), "ready": self._client.is_ready()}

    async def aclose(self):
        await self._http.aclose()


class TranslationBot(discord.Client):
    def __init__(
        self,
        store: ConfigStore,
        registry: ProviderRegistry,
        *,
        command_prefix: str = settings.COMMAND_PREFIX,
    ):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.messages = True
        intents.message_content = True
        super().__init__(intents=intents)

        self.command_prefix = command_prefix
        self.tree = app_commands.CommandTree(self)
        self.platform = DiscordPlatform(self)
        self.services = Services.build(
            store, registry, self.platform, command_prefix=command_prefix
        )

    async def setup_hook(self) -> None:
        self.tree.add_command(TranslateGroup(self.services.commands))
        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} application command(s)")
        except discord.HTTPException as err:
            logger.error(f"Failed to register commands: {err}")

    async def on_ready(self):
        logger.success(f"Logged in as {self.user}")
        self.services.events.info(f"Bot connected as {self.user}")

    async def on_message(self, message: discord.Message):
        await handle_message(self.services, message, self.command_prefix)

    async def close(self):
        await super().close()
        await self.platform.aclose()
