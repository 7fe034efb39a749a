"""Bounded, thread-safe key -> bitmask cache used by the metadata codec."""

from __future__ import annotations

import threading
from collections import OrderedDict

DEFAULT_CAPACITY = 512


class ContainmentCache:
    """LRU map from a metadata document string to its family bitmask.

    A pure optimisation: a miss only costs a JSON parse. Instances are cheap,
    so tests and hosts can each hold their own.

    Args:
        capacity: Maximum number of documents remembered; the least recently
            used entry is evicted first.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._entries: OrderedDict[str, int] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> int | None:
        with self._lock:
            mask = self._entries.get(key)
            if mask is not None:
                self._entries.move_to_end(key)
            return mask

    def put(self, key: str, mask: int) -> None:
        with self._lock:
            self._entries[key] = mask
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
