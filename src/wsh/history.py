"""Bounded command history with immediate-repeat suppression."""

from __future__ import annotations

from collections import deque
from typing import Iterator

DEFAULT_HISTORY_SIZE = 1000


class HistoryStore:
    """Ordered log of accepted commands, oldest first.

    Two adjacent entries are never equal. When the log grows past
    *capacity* the oldest entries are evicted.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        self._entries: deque[str] = deque()
        self._capacity = max(0, capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, command: str) -> None:
        """Record *command* unless it repeats the newest entry."""
        if self._entries and self._entries[-1] == command:
            return
        self._entries.append(command)
        while len(self._entries) > self._capacity:
            self._entries.popleft()

    def get(self, index: int) -> str:
        return self._entries[index]

    def __getitem__(self, index: int) -> str:
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
