"""Shared fixtures for KubeRestart tests.

Provides an in-memory ClusterClient whose list and watch responses are
scripted per call, plus snapshot factories, so the watch coordinator and the
consumer loop can be exercised without a real cluster.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from kuberestart.cluster.client import PodList, WatchItem, build_reference
from kuberestart.models.pods import (
    ContainerState,
    EventType,
    ObjectReference,
    PodSnapshot,
    TerminationRecord,
)

_FINISHED_AT = datetime(2026, 2, 18, 12, 0, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Fake cluster client
# ---------------------------------------------------------------------------


class FakeClusterClient:
    """Scripted ClusterClient.

    ``lists``   -- one entry per list call (PodList or an exception to raise);
                   the last entry is reused once the script runs out.
    ``watches`` -- one script per watch call; each script is a list of
                   WatchItems and/or exceptions.  When no scripts remain the
                   watch blocks forever and ``exhausted`` is set.
    """

    def __init__(self) -> None:
        self.lists: list[PodList | BaseException] = []
        self.watches: list[list[WatchItem | BaseException]] = []
        self.list_calls = 0
        self.watch_calls: list[tuple[str, int]] = []
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.create_error: BaseException | None = None
        self.reference_error: BaseException | None = None
        self.exhausted = asyncio.Event()

    async def list_pods(self) -> PodList:
        self.list_calls += 1
        entry = self.lists.pop(0) if len(self.lists) > 1 else self.lists[0]
        if isinstance(entry, BaseException):
            raise entry
        return entry

    async def watch_pods(self, resource_version: str, timeout_seconds: int) -> AsyncGenerator[WatchItem, None]:
        self.watch_calls.append((resource_version, timeout_seconds))
        if not self.watches:
            self.exhausted.set()
            await asyncio.Event().wait()
            return
        for entry in self.watches.pop(0):
            if isinstance(entry, BaseException):
                raise entry
            yield entry

    async def create_event(self, namespace: str, body: dict[str, Any]) -> None:
        if self.create_error is not None:
            raise self.create_error
        self.events.append((namespace, body))

    def get_reference(self, snapshot: PodSnapshot) -> ObjectReference:
        if self.reference_error is not None:
            raise self.reference_error
        return build_reference(snapshot)


# ---------------------------------------------------------------------------
# Snapshot factories
# ---------------------------------------------------------------------------


def _make_pod(
    uid: str = "uid-1",
    name: str = "web-0",
    namespace: str = "default",
    restarts: int = 0,
    resource_version: str = "100",
    reason: str = "OOMKilled",
    exit_code: int = 137,
    message: str = "",
    container: str = "app",
    init_restarts: int | None = None,
) -> PodSnapshot:
    """Single-container pod; a termination record is attached once restarts > 0."""

    def _state(cname: str, count: int) -> ContainerState:
        termination = None
        if count > 0:
            termination = TerminationRecord(
                exit_code=exit_code,
                reason=reason,
                message=message,
                finished_at=_FINISHED_AT,
            )
        return ContainerState(name=cname, restart_count=count, last_termination=termination)

    init_containers: tuple[ContainerState, ...] = ()
    if init_restarts is not None:
        init_containers = (_state("init", init_restarts),)

    return PodSnapshot(
        uid=uid,
        namespace=namespace,
        name=name,
        containers=(_state(container, restarts),),
        init_containers=init_containers,
        resource_version=resource_version,
    )


def _watch_item(event_type: EventType, snapshot: PodSnapshot) -> WatchItem:
    return WatchItem(type=event_type, snapshot=snapshot, resource_version=snapshot.resource_version)


@pytest.fixture()
def fake_client() -> FakeClusterClient:
    return FakeClusterClient()


@pytest.fixture()
def make_pod() -> Callable[..., PodSnapshot]:
    return _make_pod


@pytest.fixture()
def watch_item() -> Callable[[EventType, PodSnapshot], WatchItem]:
    return _watch_item


@pytest.fixture()
def finished_at() -> datetime:
    return _FINISHED_AT
