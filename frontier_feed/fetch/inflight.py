"""
Request deduplication for concurrent identical fetches.

The first caller for a fingerprint starts the producer as a task and
registers it; later callers await the same task. The registration is
dropped by a done-callback, which asyncio runs before it wakes any
awaiting caller, so the registry is already clean when results are
delivered. Callers await through asyncio.shield so that cancelling one
caller never cancels the shared fetch.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

Producer = Callable[[], Awaitable[Any]]


class RequestDeduplicator:
    """In-flight registry: at most one running producer per fingerprint."""

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task] = {}

    async def run(self, fingerprint: str, producer: Producer) -> Any:
        """Run producer once per fingerprint and share its outcome.

        Args:
            fingerprint: Request identity
            producer: Zero-argument coroutine function doing the real work

        Returns:
            The producer's result. If the producer raised, every joined
            caller receives the same exception instance.
        """
        task = self._in_flight.get(fingerprint)
        if task is None:
            task = asyncio.ensure_future(producer())
            self._in_flight[fingerprint] = task
            task.add_done_callback(lambda done, key=fingerprint: self._release(key, done))
        return await asyncio.shield(task)

    def is_in_flight(self, fingerprint: str) -> bool:
        return fingerprint in self._in_flight

    def clear(self) -> None:
        """Forget all registrations; running fetches still complete for their callers."""
        self._in_flight.clear()

    def __len__(self) -> int:
        return len(self._in_flight)

    def _release(self, fingerprint: str, task: asyncio.Task) -> None:
        if self._in_flight.get(fingerprint) is task:
            del self._in_flight[fingerprint]
        # Mark the exception as retrieved when every caller was cancelled.
        if not task.cancelled():
            task.exception()
