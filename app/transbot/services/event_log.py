# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/12 11:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Operator-facing event feed shown by the dashboard and the `logs` command
"""
from typing import List

from loguru import logger

from models import LogEntry, LogType
from settings import settings
from transbot.cache import RingBuffer
from transbot.platform import ChatPlatform
from transbot.services.config_store import ConfigStore
from transbot.task_manager import spawn

# loguru level used when an entry is echoed to the process log
_LEVELS = {
    "info": "INFO",
    "error": "ERROR",
    "translation": "SUCCESS",
    "ocr": "INFO",
    "debug": "DEBUG",
}

# Entry types mirrored to the configured log channel
MIRRORED_TYPES = frozenset({"info", "error", "translation"})

API_LOG_LIMIT = 50


class EventLog:
    """
    Ring buffer of `LogEntry`, most recent first

    Debug traces and operational events share one stream, told apart by
    `type`. Entries are also mirrored to the platform log channels without
    blocking the caller; a failed mirror goes to loguru only.
    """

    def __init__(
        self,
        store: ConfigStore,
        platform: ChatPlatform | None = None,
        capacity: int = settings.LOG_CAPACITY,
    ):
        self._store = store
        self._platform = platform
        self._entries: RingBuffer[LogEntry] = RingBuffer(capacity)
        self.show_debug = False

    def bind_platform(self, platform: ChatPlatform) -> None:
        self._platform = platform

    def add(self, type_: LogType, message: str) -> LogEntry:
        entry = LogEntry(type=type_, message=message)
        self._entries.push(entry)
        logger.opt(depth=1).log(_LEVELS[type_], message)
        self._mirror(entry)
        return entry

    def info(self, message: str) -> LogEntry:
        return self.add("info", message)

    def error(self, message: str) -> LogEntry:
        return self.add("error", message)

    def translation(self, message: str) -> LogEntry:
        return self.add("translation", message)

    def ocr(self, message: str) -> LogEntry:
        return self.add("ocr", message)

    def debug(self, message: str) -> LogEntry:
        return self.add("debug", message)

    def recent(self, limit: int | None = None, *, include_debug: bool = True) -> List[LogEntry]:
        entries = [e for e in self._entries if include_debug or e.type != "debug"]
        return entries if limit is None else entries[:limit]

    def for_api(self) -> List[LogEntry]:
        return self.recent(API_LOG_LIMIT, include_debug=self.show_debug)

    def __len__(self) -> int:
        return len(self._entries)

    def _mirror(self, entry: LogEntry) -> None:
        if self._platform is None:
            return

        config = self._store.config
        if entry.type in MIRRORED_TYPES:
            channel_id = config.log_channel
        elif entry.type == "debug":
            channel_id = config.debug_log_channel
        else:
            return
        if not channel_id:
            return

        spawn(self._send(channel_id, entry), name=f"mirror-{entry.type}")

    async def _send(self, channel_id: str, entry: LogEntry) -> None:
        try:
            await self._platform.send_log_entry(channel_id, entry)
        except Exception as err:
            # Never routed back into the feed, a broken log channel would loop
            logger.warning(f"Failed to send to log channel {channel_id}: {err!r}")
