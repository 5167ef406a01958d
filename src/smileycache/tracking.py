"""Automatic position tracking for the game session."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from smileycache.models import Geopoint


class PositionSink(Protocol):
    """Receives position updates one at a time."""

    def move_to(self, point: Geopoint) -> Geopoint:
        """Apply a new player position."""


class PositionTracker:
    """Queue-backed tracker that delivers geolocation events strictly in order.

    One worker applies each event through the same synchronous movement path as
    manual input, so an event (and its save) finishes before the next begins.
    """

    def __init__(
        self,
        sink: PositionSink,
        *,
        max_queue_size: int = 100,
        logger: logging.Logger | None = None,
    ) -> None:
        self._sink = sink
        self._logger = logger or logging.getLogger("smileycache.tracking")
        self._queue: asyncio.Queue[Geopoint] = asyncio.Queue(maxsize=max_queue_size)
        self._worker_task: asyncio.Task[None] | None = None

    @property
    def enabled(self) -> bool:
        return self._worker_task is not None and not self._worker_task.done()

    async def start(self) -> None:
        """Turn tracking on; calling again while running is a no-op."""
        if self.enabled:
            return

        self._worker_task = asyncio.create_task(self._worker_loop(), name="position-tracker-worker")
        self._logger.info("tracking_started", extra={"queue_maxsize": self._queue.maxsize})

    async def stop(self) -> None:
        """Turn tracking off and drop undelivered events."""
        if not self._worker_task:
            return

        self._worker_task.cancel()
        try:
            await self._worker_task
        except asyncio.CancelledError:
            pass
        finally:
            self._worker_task = None

        dropped = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
            dropped += 1
        self._logger.info("tracking_stopped", extra={"dropped_events": dropped})

    def submit(self, point: Geopoint) -> bool:
        """Queue a position update; returns ``False`` when tracking is off or the queue is full."""
        if not self.enabled:
            return False
        try:
            self._queue.put_nowait(point)
        except asyncio.QueueFull:
            self._logger.warning("position_dropped", extra={"lat": point.lat, "lng": point.lng})
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued update has been applied."""
        await self._queue.join()

    async def _worker_loop(self) -> None:
        while True:
            point = await self._queue.get()
            try:
                self._sink.move_to(point)
            except Exception:  # noqa: BLE001 - one bad update must not stop tracking.
                self._logger.exception("position_update_failed", extra={"lat": point.lat, "lng": point.lng})
            finally:
                self._queue.task_done()
