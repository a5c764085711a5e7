# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/13 15:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Wires the services together, shared by the bot and the dashboard
"""
from dataclasses import dataclass

from loguru import logger

from providers import ProviderRegistry
from settings import settings
from transbot.cache import TtlCache
from transbot.platform import ChatPlatform
from transbot.services import (
    AccessGate,
    CommandService,
    ConfigStore,
    DirectoryLookup,
    EventLog,
    MessagePipeline,
    StatsAggregator,
    TranslationHistory,
)


@dataclass
class Services:
    store: ConfigStore
    registry: ProviderRegistry
    platform: ChatPlatform
    directory: DirectoryLookup
    events: EventLog
    gate: AccessGate
    history: TranslationHistory
    stats: StatsAggregator
    pipeline: MessagePipeline
    commands: CommandService

    @classmethod
    def build(
        cls,
        store: ConfigStore,
        registry: ProviderRegistry,
        platform: ChatPlatform,
        *,
        command_prefix: str = settings.COMMAND_PREFIX,
        directory_ttl: float = settings.DIRECTORY_CACHE_TTL,
        stats_ttl: float = settings.STATS_CACHE_TTL,
        history_capacity: int = settings.HISTORY_CAPACITY,
        log_capacity: int = settings.LOG_CAPACITY,
    ) -> "Services":
        directory = DirectoryLookup(platform, TtlCache(ttl=directory_ttl))
        events = EventLog(store, platform, capacity=log_capacity)
        gate = AccessGate(store, platform, command_prefix=command_prefix)
        history = TranslationHistory(capacity=history_capacity)
        stats = StatsAggregator(ttl=stats_ttl)
        pipeline = MessagePipeline(
            store=store,
            gate=gate,
            registry=registry,
            directory=directory,
            platform=platform,
            events=events,
            history=history,
            stats=stats,
        )
        commands = CommandService(store, registry, gate, directory, events)
        return cls(
            store=store,
            registry=registry,
            platform=platform,
            directory=directory,
            events=events,
            gate=gate,
            history=history,
            stats=stats,
            pipeline=pipeline,
            commands=commands,
        )

    async def aclose(self):
        """Flush the pending config write and release the provider HTTP client"""
        self.store.flush()
        await self.registry.aclose()
        logger.info("Services closed")
