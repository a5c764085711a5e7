# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/13 10:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : The `translate` verbs shared by the slash and prefix front-ends

Front-ends only parse arguments and render `CommandResult`; everything that
reads or mutates state lives here.
"""
import functools
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List

from loguru import logger

from models import ReplyField
from providers import ProviderError, ProviderRegistry
from transbot.services.access_control import AccessGate
from transbot.services.config_store import ConfigStore
from transbot.services.directory_service import DirectoryLookup
from transbot.services.event_log import EventLog

LOGS_COMMAND_LIMIT = 10
DESCRIPTION_LIMIT = 4000

HELP_ENTRIES = [
    ("set #channel <language>", "Set a channel for translation"),
    ("remove #channel", "Remove translation from a channel"),
    ("ocr enable #channel", "Enable OCR for a channel"),
    ("ocr disable #channel", "Disable OCR for a channel"),
    ("model", "Show current and available translation models"),
    ("model <name>", "Set the translation model"),
    ("ocrmodel", "Show current and available OCR models"),
    ("ocrmodel <name>", "Set the OCR model"),
    ("provider", "Show current and available AI providers"),
    ("provider <name>", "Set the AI provider"),
    ("list", "List all configured channels"),
    ("status", "Check bot and AI provider status"),
    ("logs", "View recent bot logs"),
    ("logchannel #channel", "Set log channel"),
    ("logchannel remove", "Remove log channel"),
    ("help", "Show this help message"),
]


@dataclass
class CommandContext:
    """Who invoked a verb, and where"""

    guild_id: str | None
    user_id: str
    channel_id: str
    channel_name: str
    can_manage_guild: bool = False
    """Platform-level Manage Server permission of the invoker"""


@dataclass
class CommandResult:
    text: str = ""
    title: str | None = None
    fields: List[ReplyField] = field(default_factory=list)
    ok: bool = True

    @property
    def is_embed(self) -> bool:
        return self.title is not None or bool(self.fields)


def requires_admin(func: Callable[..., Awaitable[CommandResult]]):
    """
    Reject the verb unless the invoker may change the bot configuration

    Admins are members holding one of the configured admin roles, or the
    Manage Server permission.
    """

    @functools.wraps(func)
    async def wrapper(self: "CommandService", ctx: CommandContext, *args, **kwargs):
        if not await self.is_admin(ctx):
            logger.info(f"Access denied for {func.__name__} from user {ctx.user_id}")
            return CommandResult(
                text="⛔ You need an admin role or the Manage Server permission to do that.",
                ok=False,
            )
        return await func(self, ctx, *args, **kwargs)

    return wrapper


def _is_read_only(name: str | None) -> bool:
    return not name


class CommandService:
    def __init__(
        self,
        store: ConfigStore,
        registry: ProviderRegistry,
        gate: AccessGate,
        directory: DirectoryLookup,
        events: EventLog,
    ):
        self._store = store
        self._registry = registry
        self._gate = gate
        self._directory = directory
        self._events = events

    async def is_admin(self, ctx: CommandContext) -> bool:
        if ctx.can_manage_guild:
            return True
        if not ctx.guild_id:
            return False
        return await self._gate.has_any_role(
            ctx.guild_id, ctx.user_id, self._store.admin_role_ids()
        )

    def _provider_name(self, key: str) -> str:
        if key in self._registry:
            return self._registry.get(key).display_name
        return key

    # ---------------------------------------------------------------------
    # Channel routes
    # ---------------------------------------------------------------------

    @requires_admin
    async def set_channel(
        self, ctx: CommandContext, channel_id: str, channel_name: str, language: str
    ) -> CommandResult:
        language = language.strip()
        if not language:
            return CommandResult(text="Usage: set #channel <language>", ok=False)

        self._store.set_route(
            channel_id, language, guild_id=ctx.guild_id, channel_name=channel_name
        )
        self._events.info(f"Added translation channel: #{channel_name} → {language}")
        return CommandResult(text=f"✅ Translation set for #{channel_name} → {language}")

    @requires_admin
    async def remove_channel(
        self, ctx: CommandContext, channel_id: str, channel_name: str
    ) -> CommandResult:
        if self._store.remove_route(channel_id) is None:
            return CommandResult(text=f"⚠️ No translation set for #{channel_name}", ok=False)
        self._events.info(f"Removed translation channel: #{channel_name}")
        return CommandResult(text=f"✅ Translation removed for #{channel_name}")

    async def list_channels(self, ctx: CommandContext) -> CommandResult:
        routes = self._store.config.channels
        if not routes:
            return CommandResult(text="No translation channels configured.")

        lines = []
        for channel_id, route in routes.items():
            if ctx.guild_id and route.guild_id and route.guild_id != ctx.guild_id:
                continue
            name = route.channel_name or await self._directory.channel_label(
                route.guild_id, channel_id
            )
            flags = []
            if route.enabled is False:
                flags.append("disabled")
            if route.enable_ocr:
                flags.append("OCR")
            suffix = f" ({', '.join(flags)})" if flags else ""
            lines.append(f"#{name} → {route.language}{suffix}")

        return CommandResult(
            title="Translation Channels", text="\n".join(lines) or "No active translations"
        )

    @requires_admin
    async def set_ocr(
        self, ctx: CommandContext, action: str | None, channel_id: str, channel_name: str
    ) -> CommandResult:
        if self._store.route(channel_id) is None:
            return CommandResult(
                text=f"⚠️ Translation not configured for #{channel_name}. Use `set` first.",
                ok=False,
            )

        action = (action or "").lower()
        if action in ("enable", "on"):
            self._store.update_route(channel_id, enable_ocr=True)
            self._events.info(f"OCR enabled for #{channel_name}")
            return CommandResult(text=f"✅ OCR enabled for #{channel_name}")
        if action in ("disable", "off"):
            self._store.update_route(channel_id, enable_ocr=False)
            self._events.info(f"OCR disabled for #{channel_name}")
            return CommandResult(text=f"✅ OCR disabled for #{channel_name}")
        return CommandResult(text="Usage: ocr enable #channel | ocr disable #channel", ok=False)

    # ---------------------------------------------------------------------
    # Observability
    # ---------------------------------------------------------------------

    async def status(self, ctx: CommandContext) -> CommandResult:
        config = self._store.ai_config()
        try:
            status = await self._registry.check_status(config)
        except ProviderError as err:
            return CommandResult(title="Bot Status", text=f"**Bot**: ✅ Running\n**Error**: {err}")

        lines = [
            "**Bot**: ✅ Running",
            f"**AI Provider**: {self._provider_name(config.provider)}",
            f"**Status**: {'✅ Available' if status.available else '❌ Not available'}",
        ]
        if status.models:
            lines.append(f"**Models**: {', '.join(status.models)}")
        elif status.error:
            lines.append(f"**Error**: {status.error}")
        return CommandResult(title="Bot Status", text="\n".join(lines))

    async def logs(self, ctx: CommandContext) -> CommandResult:
        entries = self._events.recent(LOGS_COMMAND_LIMIT)
        if not entries:
            return CommandResult(text="No logs available.")

        text = "\n".join(
            f"[{entry.time:%H:%M:%S}] **{entry.type}**: {entry.message}" for entry in entries
        )
        if len(text) > DESCRIPTION_LIMIT:
            text = text[: DESCRIPTION_LIMIT - 3] + "..."
        return CommandResult(title="Recent Logs", text=text)

    @requires_admin
    async def set_log_channel(
        self, ctx: CommandContext, action: str | None, channel_id: str, channel_name: str
    ) -> CommandResult:
        action = (action or "set").lower()
        if action in ("remove", "disable"):
            self._store.set_log_channel(None)
            self._events.info("Log channel disabled")
            return CommandResult(text="✅ Log channel removed.")
        if action == "set":
            self._store.set_log_channel(channel_id)
            self._events.info(f"Log channel set to #{channel_name}")
            return CommandResult(text=f"✅ Log channel set to #{channel_name}")
        return CommandResult(text="Usage: logchannel #channel | logchannel remove", ok=False)

    # ---------------------------------------------------------------------
    # AI settings
    # ---------------------------------------------------------------------

    async def _model_overview(self, title: str, label: str, current: str) -> CommandResult:
        config = self._store.ai_config()
        provider = self._provider_name(config.provider)
        try:
            models = await self._registry.list_models(config)
        except ProviderError as err:
            logger.warning(f"Failed to list models: {err}")
            return CommandResult(text=f"{label}: **{current}** (Provider: {provider})")

        available = "\n".join(models) or "No models available"
        if self._registry.get(config.provider).requires_api_key:
            available += f"\n\nNote: For {provider}, enter model name manually."
        return CommandResult(
            title=title,
            fields=[
                ReplyField(name=label, value=current),
                ReplyField(name="Provider", value=provider),
                ReplyField(name="Available Models", value=available),
            ],
        )

    async def model(self, ctx: CommandContext, name: str | None = None) -> CommandResult:
        if _is_read_only(name):
            return await self._model_overview(
                "🤖 Translation Model", "Current Model", self._store.model
            )
        return await self._set_model(ctx, name)

    @requires_admin
    async def _set_model(self, ctx: CommandContext, name: str) -> CommandResult:
        self._store.set_model(name)
        self._events.info(f"Translation model changed to: {name}")
        return CommandResult(text=f"✅ Translation model set to: **{name}**")

    async def ocr_model(self, ctx: CommandContext, name: str | None = None) -> CommandResult:
        if _is_read_only(name):
            return await self._model_overview(
                "📷 OCR Model", "Current OCR Model", self._store.ocr_model
            )
        return await self._set_ocr_model(ctx, name)

    @requires_admin
    async def _set_ocr_model(self, ctx: CommandContext, name: str) -> CommandResult:
        self._store.set_ocr_model(name)
        self._events.info(f"OCR model changed to: {name}")
        return CommandResult(text=f"✅ OCR model set to: **{name}**")

    async def provider(self, ctx: CommandContext, name: str | None = None) -> CommandResult:
        if _is_read_only(name):
            catalogue = "\n".join(f"{p.key}: {p.name}" for p in self._registry.catalogue())
            return CommandResult(
                title="🔌 AI Provider",
                fields=[
                    ReplyField(name="Current Provider", value=self._provider_name(self._store.provider)),
                    ReplyField(name="Available Providers", value=catalogue),
                ],
            )
        return await self._set_provider(ctx, name.lower())

    @requires_admin
    async def _set_provider(self, ctx: CommandContext, name: str) -> CommandResult:
        if name not in self._registry:
            return CommandResult(
                text=f"❌ Unknown provider: **{name}**\nAvailable: {', '.join(self._registry.keys)}",
                ok=False,
            )
        self._store.set_provider(name)
        self._events.info(f"AI provider changed to: {name}")
        return CommandResult(text=f"✅ AI provider set to: **{self._provider_name(name)}**")

    @staticmethod
    def help(prefix: str) -> CommandResult:
        return CommandResult(
            title="🤖 Translation Bot Commands",
            fields=[ReplyField(name=f"{prefix} {usage}", value=desc) for usage, desc in HELP_ENTRIES],
        )
