# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/12 11:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Translation counters, history and the cached stats snapshot
"""
import resource
import sys
import time
from collections import Counter
from typing import Any, Callable, Dict, List

from models import TranslationRecord
from settings import settings
from transbot.cache import RingBuffer, TtlCache, MISSING

_SNAPSHOT_KEY = "snapshot"


def _rss_megabytes() -> int:
    # ru_maxrss is KiB on Linux and bytes on macOS
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return round(peak / divisor)


class TranslationHistory:
    """The last N translations, most recent first"""

    def __init__(self, capacity: int = settings.HISTORY_CAPACITY):
        self._records: RingBuffer[TranslationRecord] = RingBuffer(capacity)

    def record(self, record: TranslationRecord) -> None:
        self._records.push(record)

    def latest(self, limit: int | None = None) -> List[TranslationRecord]:
        return self._records.latest(limit)

    def __len__(self) -> int:
        return len(self._records)


class StatsAggregator:
    """
    Monotonic counters plus a short-lived derived snapshot

    The snapshot is rebuilt at most once per cache ttl and dropped whenever a
    translation is recorded. `uptime` is always computed fresh.
    """

    def __init__(
        self,
        ttl: float = settings.STATS_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._clock = clock
        self._started_at = clock()
        self._cache = TtlCache(ttl=ttl, clock=clock)
        self.total_translations = 0
        self.languages: Counter = Counter()

    def record(self, language: str) -> None:
        self.total_translations += 1
        self.languages[language] += 1
        self._cache = TtlCache(ttl=self._cache.ttl, clock=self._clock)

    @property
    def uptime_ms(self) -> int:
        return int((self._clock() - self._started_at) * 1000)

    def _build(self) -> Dict[str, Any]:
        return {
            "totalTranslations": self.total_translations,
            "languages": dict(self.languages),
            # The interpreter has no separate heap figure, so only the resident set is reported
            "memory": {"rss": _rss_megabytes()},
        }

    def snapshot(self) -> Dict[str, Any]:
        cached = self._cache.get(_SNAPSHOT_KEY)
        if cached is MISSING:
            cached = self._build()
            self._cache.set(_SNAPSHOT_KEY, cached)
        return {**cached, "uptime": self.uptime_ms}
