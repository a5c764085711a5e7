# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/12 09:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : In-memory TTL cache and fixed-capacity ring buffer
"""
import time
from collections import deque
from typing import Any, Callable, Dict, Generic, Hashable, Iterator, List, Tuple, TypeVar

T = TypeVar("T")


class _Missing:
    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


MISSING: Any = _Missing()
"""
Returned by `TtlCache.get` for absent or expired keys, so that a cached
`None` can be told apart from a miss.
"""


class TtlCache:
    """
    Key/value cache with a fixed per-entry lifetime

    An entry is present while `now - inserted_at < ttl`; expiry is checked
    lazily on read. Overwriting a key resets its timer.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[Any, float]] = {}

    def get(self, key: Hashable, default: Any = MISSING) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        value, inserted_at = entry
        if self._clock() - inserted_at >= self.ttl:
            del self._entries[key]
            return default
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (value, self._clock())

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not MISSING

    def __len__(self) -> int:
        return len(self._entries)


class RingBuffer(Generic[T]):
    """Most-recent-first buffer, the oldest item is dropped once full"""

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._items: deque = deque(maxlen=capacity)

    def push(self, item: T) -> None:
        self._items.appendleft(item)

    def latest(self, limit: int | None = None) -> List[T]:
        if limit is None:
            return list(self._items)
        return [item for _, item in zip(range(limit), self._items)]

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
