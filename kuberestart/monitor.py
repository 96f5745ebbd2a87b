"""Consumer loop: state store + restart detector + event emitter.

Drains the lifecycle queue in delivery order.  All state mutation, diffing
and event submission happens here, on a single task.
"""

from __future__ import annotations

import asyncio

from kuberestart.cache.pod_store import PodStore
from kuberestart.detector.restarts import detect_restarts
from kuberestart.errors import WatchFailedError
from kuberestart.models.pods import EventType, LifecycleEvent, RestartRecord
from kuberestart.notifications.emitter import EventEmitter
from kuberestart.observability.logging import get_logger
from kuberestart.observability.metrics import restarts_detected_total, tracked_pods, watch_events_total

_log = get_logger("monitor")


class RestartMonitor:
    """Applies lifecycle events and emits an event per detected restart."""

    def __init__(
        self,
        queue: asyncio.Queue[LifecycleEvent],
        store: PodStore,
        emitter: EventEmitter,
    ) -> None:
        self._queue = queue
        self._store = store
        self._emitter = emitter
        self._restarts_detected = 0

    @property
    def store(self) -> PodStore:
        return self._store

    @property
    def restarts_detected(self) -> int:
        return self._restarts_detected

    async def run(self) -> None:
        """Drain the queue until the producer reports a fatal error.

        Raises:
            WatchFailedError: when an ERROR event is dequeued.
        """
        while True:
            event = await self._queue.get()
            try:
                await self.handle(event)
            finally:
                self._queue.task_done()

    async def handle(self, event: LifecycleEvent) -> list[RestartRecord]:
        """Apply one event; return the restarts it revealed."""
        if event.type == EventType.ERROR:
            raise WatchFailedError(event.error)

        watch_events_total.labels(type=str(event.type)).inc()
        update = self._store.apply(event)
        tracked_pods.set(len(self._store))
        if update is None:
            return []

        records = detect_restarts(update.current, update.previous)
        for record in records:
            self._restarts_detected += 1
            restarts_detected_total.labels(container_kind=str(record.container_kind)).inc()
            await self._emitter.emit(record, update.current)
        return records
