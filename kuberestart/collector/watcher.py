"""Pod watch coordinator: list + watch with resume and relist recovery.

The coordinator is the only producer on the lifecycle queue.  It runs a two
state machine::

    LISTING --(list complete)--> WATCHING --(watch ends)--> WATCHING
       ^                             |
       +------(cursor expired)-------+
                                     |
                            (any other error)--> FAILED

A full list is always delivered as ADDED events before the first watch is
opened, so every existing pod is known before incremental events are trusted.
The cursor advances to each delivered event's resource version before the
next event is read; a reconnect therefore resumes strictly after the last
delivered point.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Callable
from contextlib import aclosing
from enum import StrEnum

from kuberestart.cluster.client import ClusterClient
from kuberestart.errors import ClusterAPIError, CursorExpiredError
from kuberestart.models.pods import EventType, LifecycleEvent, WatchStatus
from kuberestart.observability.logging import get_logger
from kuberestart.observability.metrics import watch_relists_total

_log = get_logger("collector.watcher")

WATCH_TIMEOUT_BASE_S = 300
QUEUE_MAXSIZE = 128


class WatchState(StrEnum):
    """Coordinator lifecycle state."""

    IDLE = "idle"
    LISTING = "listing"
    WATCHING = "watching"
    FAILED = "failed"


def watch_timeout(base: int = WATCH_TIMEOUT_BASE_S, rand: Callable[[], float] = random.random) -> int:
    """Return a watch timeout in ``[base, 2 * base)`` seconds.

    Randomised so that many monitors do not reconnect in lock-step.
    """
    return min(base + int(base * rand()), 2 * base - 1)


def new_event_queue(maxsize: int = QUEUE_MAXSIZE) -> asyncio.Queue[LifecycleEvent]:
    return asyncio.Queue(maxsize=maxsize)


def _raise_for_status(status: WatchStatus | None) -> None:
    status = status or WatchStatus(code=500, reason="Unknown")
    if status.is_expired:
        raise CursorExpiredError(status.message or status.reason)
    raise ClusterAPIError(status.code, f"{status.reason}: {status.message}")


class WatchCoordinator:
    """Produces LifecycleEvents for every pod in the cluster onto *queue*.

    ``queue.put`` is awaited, so a stalled consumer stalls the watch stream.
    A fatal error is delivered to the consumer as an ERROR event and ends the
    coordinator; it never silently stops producing.
    """

    def __init__(
        self,
        client: ClusterClient,
        queue: asyncio.Queue[LifecycleEvent],
        timeout_base: int = WATCH_TIMEOUT_BASE_S,
    ) -> None:
        self._client = client
        self._queue = queue
        self._timeout_base = timeout_base

        self._resource_version = ""
        self._state = WatchState.IDLE
        self._relist_count = 0
        self._delivered = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def resource_version(self) -> str:
        return self._resource_version

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def relist_count(self) -> int:
        return self._relist_count

    @property
    def delivered(self) -> int:
        return self._delivered

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Run the coordinator as a background task.  Idempotent."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self.run(), name="pod-watch-coordinator")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run(self) -> None:
        """List, then watch forever; relist on cursor expiry."""
        while True:
            try:
                await self._list()
                while True:
                    await self._watch_once()
            except CursorExpiredError as exc:
                _log.info(
                    "watch_cursor_expired",
                    resource_version=self._resource_version,
                    detail=str(exc),
                    action="relist",
                )
                self._resource_version = ""
                self._relist_count += 1
                watch_relists_total.inc()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self._state = WatchState.FAILED
                _log.error(
                    "watch_failed",
                    resource_version=self._resource_version,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                await self._queue.put(LifecycleEvent.failed(exc, self._resource_version))
                return

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    async def _list(self) -> None:
        self._state = WatchState.LISTING
        pod_list = await self._client.list_pods()
        for snapshot in pod_list.items:
            await self._queue.put(LifecycleEvent.added(snapshot))
            self._delivered += 1
        self._resource_version = pod_list.resource_version
        _log.info("pods_listed", count=len(pod_list.items), resource_version=self._resource_version)

    async def _watch_once(self) -> None:
        """Consume one watch connection until the server or timeout closes it."""
        self._state = WatchState.WATCHING
        timeout = watch_timeout(self._timeout_base)
        _log.info("watch_started", resource_version=self._resource_version, timeout_seconds=timeout)

        async with aclosing(self._client.watch_pods(self._resource_version, timeout)) as items:
            async for item in items:
                if item.type == EventType.ERROR:
                    _raise_for_status(item.status)

                if item.type == EventType.BOOKMARK:
                    self._advance(item.resource_version)
                    continue

                if item.snapshot is None:
                    _log.warning("watch_unexpected_kind", kind=item.kind, event_type=str(item.type))
                    continue

                self._advance(item.resource_version)
                await self._queue.put(LifecycleEvent(item.type, item.snapshot, item.resource_version))
                self._delivered += 1

        _log.debug("watch_closed", resource_version=self._resource_version)

    def _advance(self, resource_version: str) -> None:
        if resource_version:
            self._resource_version = resource_version
