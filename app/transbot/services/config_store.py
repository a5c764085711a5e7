# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/12 10:15
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Process-wide runtime configuration with debounced persistence
"""
import asyncio
from pathlib import Path
from typing import Callable, List

from loguru import logger
from pydantic import ValidationError

from models import AIConfig, BotConfig, ChannelRoute, RoleEntry, RoleKind
from settings import settings


class DebouncedWriter:
    """
    Collapses a burst of save requests into one write

    At most one timer is pending. The write runs when the timer fires and
    serializes whatever state exists at that moment, so N requests inside the
    window produce exactly one write holding the state after the Nth.
    """

    def __init__(self, write: Callable[[], None], delay: float = settings.CONFIG_SAVE_DELAY):
        self._write = write
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        if self._handle is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (CLI, shutdown hooks): nothing to debounce against
            self._write()
            return
        self._handle = loop.call_later(self.delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        self._write()

    def flush(self) -> None:
        """Write now if a save is pending, synchronously"""
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        self._write()


class ConfigStore:
    """
    In-memory `BotConfig` shared by the pipeline, the chat commands and the dashboard

    Every mutation schedules a debounced write of the whole document. A failed
    write is logged and the state stays in memory; the next mutation retries.
    """

    def __init__(
        self, path: Path = settings.CONFIG_FILE, *, save_delay: float = settings.CONFIG_SAVE_DELAY
    ):
        self.path = Path(path)
        self._config = BotConfig()
        self._writer = DebouncedWriter(self._write, delay=save_delay)

    @property
    def config(self) -> BotConfig:
        return self._config

    @property
    def save_pending(self) -> bool:
        return self._writer.pending

    def load(self) -> BotConfig:
        if not self.path.is_file():
            logger.info(f"No config at {self.path}, starting with defaults")
            self._config = BotConfig()
            return self._config

        try:
            self._config = BotConfig.model_validate_json(self.path.read_bytes())
            logger.info(f"Loaded config from {self.path} ({len(self._config.channels)} channels)")
        except (ValidationError, UnicodeDecodeError, OSError) as err:
            logger.error(f"Failed to load config from {self.path}, resetting to defaults - {err}")
            self._config = BotConfig()
        return self._config

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                self._config.model_dump_json(by_alias=True, indent=2), encoding="utf8"
            )
            logger.debug(f"Config saved to {self.path}")
        except OSError:
            logger.exception(f"Failed to save config to {self.path}")

    def save(self) -> None:
        self._writer.schedule()

    def flush(self) -> None:
        self._writer.flush()

    # ---------------------------------------------------------------------
    # Channel routes
    # ---------------------------------------------------------------------

    def route(self, channel_id: str) -> ChannelRoute | None:
        return self._config.channels.get(channel_id)

    def set_route(
        self,
        channel_id: str,
        language: str,
        *,
        guild_id: str | None = None,
        channel_name: str | None = None,
    ) -> ChannelRoute:
        route = ChannelRoute(language=language, guild_id=guild_id, channel_name=channel_name)
        self._config.channels[channel_id] = route
        self.save()
        return route

    def update_route(
        self,
        channel_id: str,
        *,
        language: str | None = None,
        enabled: bool | None = None,
        enable_ocr: bool | None = None,
    ) -> ChannelRoute | None:
        route = self._config.channels.get(channel_id)
        if route is None:
            return None
        if language:
            route.language = language
        if enabled is not None:
            route.enabled = enabled
        if enable_ocr is not None:
            route.enable_ocr = enable_ocr
        self.save()
        return route

    def remove_route(self, channel_id: str) -> ChannelRoute | None:
        route = self._config.channels.pop(channel_id, None)
        if route is not None:
            self.save()
        return route

    # ---------------------------------------------------------------------
    # Role rules and ignore list
    # ---------------------------------------------------------------------

    def _role_map(self, kind: RoleKind):
        if kind is RoleKind.OCR:
            return self._config.ocr_roles
        return self._config.allowed_roles

    def roles(self, kind: RoleKind, channel_id: str) -> List[RoleEntry]:
        return self._role_map(kind).get(channel_id, [])

    def add_role(self, kind: RoleKind, channel_id: str, role: RoleEntry) -> bool:
        entries = self._role_map(kind).setdefault(channel_id, [])
        if any(r.id == role.id for r in entries):
            return False
        entries.append(role)
        self.save()
        return True

    def remove_role(self, kind: RoleKind, channel_id: str, role_id: str) -> bool:
        role_map = self._role_map(kind)
        if channel_id not in role_map:
            return False
        before = len(role_map[channel_id])
        role_map[channel_id] = [r for r in role_map[channel_id] if r.id != role_id]
        self.save()
        return len(role_map[channel_id]) != before

    def is_ignored(self, user_id: str) -> bool:
        return user_id in self._config.ignored_users

    def ignore_user(self, user_id: str) -> bool:
        if user_id in self._config.ignored_users:
            return False
        self._config.ignored_users.append(user_id)
        self.save()
        return True

    def unignore_user(self, user_id: str) -> bool:
        before = len(self._config.ignored_users)
        self._config.ignored_users = [u for u in self._config.ignored_users if u != user_id]
        self.save()
        return len(self._config.ignored_users) != before

    def add_admin_role(self, role: RoleEntry) -> bool:
        if any(r.id == role.id for r in self._config.admin_roles):
            return False
        self._config.admin_roles.append(role)
        self.save()
        return True

    def remove_admin_role(self, role_id: str) -> bool:
        before = len(self._config.admin_roles)
        self._config.admin_roles = [r for r in self._config.admin_roles if r.id != role_id]
        self.save()
        return len(self._config.admin_roles) != before

    def admin_role_ids(self) -> List[str]:
        return [r.id for r in self._config.admin_roles]

    # ---------------------------------------------------------------------
    # Log channels and AI settings
    # ---------------------------------------------------------------------

    def set_log_channel(self, channel_id: str | None) -> None:
        self._config.log_channel = channel_id or None
        self.save()

    def set_debug_log_channel(self, channel_id: str | None) -> None:
        self._config.debug_log_channel = channel_id or None
        self.save()

    def set_model(self, name: str | None) -> None:
        self._config.model = name or None
        self.save()

    def set_ocr_model(self, name: str | None) -> None:
        self._config.ocr_model = name or None
        self.save()

    def set_provider(self, key: str) -> None:
        self._config.ai_provider = key
        self.save()

    def set_api_key(self, api_key: str) -> None:
        self._config.ai_api_key = api_key or ""
        self.save()

    def set_base_url(self, base_url: str) -> None:
        self._config.ai_base_url = base_url or ""
        self.save()

    def set_ollama_url(self, url: str | None) -> None:
        self._config.ollama_url = url or None
        self.save()

    @property
    def model(self) -> str:
        return self._config.model or settings.DEFAULT_MODEL

    @property
    def ocr_model(self) -> str:
        return self._config.ocr_model or self.model

    @property
    def provider(self) -> str:
        return self._config.ai_provider or "ollama"

    @property
    def ollama_url(self) -> str:
        return (self._config.ollama_url or settings.DEFAULT_OLLAMA_URL).rstrip("/")

    def ai_config(self) -> AIConfig:
        """Snapshot of the provider settings for one call"""
        return AIConfig(
            provider=self.provider,
            api_key=self._config.ai_api_key,
            base_url=self._config.ai_base_url,
            model=self._config.model,
            ocr_model=self.ocr_model,
            ollama_url=self.ollama_url,
        )
