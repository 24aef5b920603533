"""Periodic cache refresh."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable

from .logging_utils import get_logger, log_event
from .service import ContentService

RefreshCallback = Callable[[], Awaitable[None]]


class AutoRefresher:
    """Clears the service cache on a fixed interval.

    After every clear the optional on_refresh callback runs, typically to
    reload whatever page is currently displayed. Any exception from the
    callback is logged and the loop keeps going.
    """

    def __init__(
        self,
        service: ContentService,
        interval_seconds: float | None = None,
        on_refresh: RefreshCallback | None = None,
        logger: logging.Logger | None = None,
    ):
        self.service = service
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else service.cfg.cache.refresh_interval_seconds
        )
        self.on_refresh = on_refresh
        self.logger = logger or get_logger("refresh")
        self.refreshes = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        log_event(
            self.logger, "Auto refresh started", event="refresh_started",
            interval_seconds=self.interval_seconds,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        log_event(self.logger, "Auto refresh stopped", event="refresh_stopped")

    async def refresh_now(self) -> None:
        """Clear the cache and run the reload callback."""
        self.service.clear()
        self.refreshes += 1
        if self.on_refresh is None:
            return
        try:
            await self.on_refresh()
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Refresh callback failed",
                level=logging.ERROR,
                event="refresh_failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.refresh_now()
