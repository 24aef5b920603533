"""
In-memory response cache with a single process-wide TTL.

Entries are keyed by query fingerprint. Expiry is lazy: an expired entry
is reported as a miss on read and replaced on the next write; nothing is
evicted eagerly and there is no partial invalidation.
"""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any, Callable

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the monotonic time it was stored.

    Attributes:
        value: Cached payload
        stored_at: Clock reading when the value was stored
    """

    value: Any
    stored_at: float

    def is_valid(self, now: float, ttl_seconds: float) -> bool:
        return now - self.stored_at < ttl_seconds


class _Miss:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS: Any = _Miss()


class CacheStore:
    """Fingerprint -> (value, timestamp) map with one uniform TTL.

    Attributes:
        ttl_seconds: Time-to-live shared by every entry
        generation: Bumped by every clear(); a value fetched under an older
            generation must not be stored
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Clock = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self.generation = 0

    def get(self, fingerprint: str) -> Any:
        """Return the cached value, or MISS if absent or expired."""
        entry = self._entries.get(fingerprint)
        if entry is None or not entry.is_valid(self._clock(), self.ttl_seconds):
            return MISS
        return entry.value

    def set(self, fingerprint: str, value: Any) -> None:
        """Store value with the current time, replacing any prior entry."""
        self._entries[fingerprint] = CacheEntry(value=value, stored_at=self._clock())

    def set_if_current(self, fingerprint: str, value: Any, generation: int) -> bool:
        """Store value only if no clear() happened since generation was read."""
        if generation != self.generation:
            return False
        self.set(fingerprint, value)
        return True

    def clear(self) -> None:
        self._entries.clear()
        self.generation += 1

    def __len__(self) -> int:
        return len(self._entries)
