# -*- coding: utf-8 -*-

from .access_control import AccessGate, Admission
from .command_service import CommandService, CommandContext, CommandResult
from .config_store import ConfigStore, DebouncedWriter
from .directory_service import DirectoryLookup
from .event_log import EventLog
from .pipeline_service import MessagePipeline
from .stats_service import StatsAggregator, TranslationHistory

__all__ = [
    "AccessGate",
    "Admission",
    "CommandService",
    "CommandContext",
    "CommandResult",
    "ConfigStore",
    "DebouncedWriter",
    "DirectoryLookup",
    "EventLog",
    "MessagePipeline",
    "StatsAggregator",
    "TranslationHistory",
]
