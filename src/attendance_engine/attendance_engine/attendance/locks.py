from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class UserLockRegistry:
    """Per-user mutual exclusion around read-check-write sequences.

    Locks exist only while someone holds or waits for them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    @contextmanager
    def hold(self, user_key: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(user_key)
            if entry is None:
                entry = self._entries[user_key] = _Entry()
            entry.holders += 1

        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    self._entries.pop(user_key, None)

    def active_keys(self) -> list[str]:
        with self._guard:
            return sorted(self._entries)
