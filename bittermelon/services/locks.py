"""
Per-key statistics locks.

Two mutations that touch the same statistics key would otherwise both read
the reviews, and the later replace could overwrite a fresher row with stale
totals. The ledger therefore holds a lock for every affected key from before
its write until its transaction has ended.

Locks are re-entrant per thread, always taken in sorted key order, and
dropped from the registry once nobody holds or waits for them.
"""

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache

from bittermelon.config import get_settings
from bittermelon.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)

# A statistics key: ("title" | "critic" | "outlet", id)
StatsKey = tuple[str, int]


@dataclass
class _Entry:
    lock: threading.RLock
    users: int = 0


class KeyLockManager:
    """Registry of re-entrant locks keyed by statistics key.

    Attributes:
        timeout: Seconds to wait for each key before giving up.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout if timeout is not None else get_settings().stats_lock_timeout
        self._guard = threading.Lock()
        self._entries: dict[StatsKey, _Entry] = {}

    def _checkout(self, key: StatsKey) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry(threading.RLock())
            entry.users += 1
            return entry

    def _checkin(self, key: StatsKey) -> None:
        with self._guard:
            entry = self._entries[key]
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    @contextmanager
    def acquire(self, keys: Iterable[StatsKey]) -> Iterator[list[StatsKey]]:
        """Hold the locks for keys until the block exits.

        Raises:
            LockTimeoutError: If a key is not acquired within the timeout;
                keys taken so far are released first.
        """
        ordered = sorted(set(keys))
        held: list[tuple[StatsKey, _Entry]] = []
        try:
            for key in ordered:
                entry = self._checkout(key)
                if not entry.lock.acquire(timeout=self.timeout):
                    self._checkin(key)
                    logger.warning("Timed out after %.1fs waiting for %s", self.timeout, key)
                    raise LockTimeoutError(f"Statistics key {key} is busy")
                held.append((key, entry))
            yield ordered
        finally:
            for key, entry in reversed(held):
                entry.lock.release()
                self._checkin(key)

    def active_keys(self) -> set[StatsKey]:
        """Keys currently held or waited for."""
        with self._guard:
            return set(self._entries)


@lru_cache
def get_lock_manager() -> KeyLockManager:
    """Process-wide lock manager shared by every ledger."""
    return KeyLockManager()
