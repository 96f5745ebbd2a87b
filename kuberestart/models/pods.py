"""Pod state data structures.

Snapshots are produced by the cluster client for every list item and watch
delivery. They are frozen: an update replaces the stored snapshot wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class EventType(StrEnum):
    """Watch event type, mirroring the Kubernetes watch protocol."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


class ContainerKind(StrEnum):
    """Which container status list a container was found in."""

    CONTAINER = "container"
    INIT_CONTAINER = "init_container"


@dataclass(frozen=True)
class TerminationRecord:
    """Most recent termination of a container (``lastState.terminated``)."""

    exit_code: int
    reason: str = ""
    message: str = ""
    finished_at: datetime | None = None


@dataclass(frozen=True)
class ContainerState:
    """Restart-relevant subset of a ``V1ContainerStatus``."""

    name: str
    restart_count: int = 0
    last_termination: TerminationRecord | None = None


@dataclass(frozen=True)
class PodSnapshot:
    """Immutable view of a pod at the resource version it was observed at."""

    uid: str
    namespace: str
    name: str
    containers: tuple[ContainerState, ...] = ()
    init_containers: tuple[ContainerState, ...] = ()
    resource_version: str = ""

    def container_map(self) -> dict[str, ContainerState]:
        return {c.name: c for c in self.containers}

    def init_container_map(self) -> dict[str, ContainerState]:
        return {c.name: c for c in self.init_containers}

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class WatchStatus:
    """Structured ``metav1.Status`` carried by a watch ERROR event."""

    code: int = 0
    reason: str = ""
    message: str = ""

    @property
    def is_expired(self) -> bool:
        """True when the server no longer retains the requested resource version."""
        return self.code == 410 or self.reason in ("Expired", "Gone")


@dataclass(frozen=True)
class LifecycleEvent:
    """One entry on the producer/consumer queue.

    ADDED/MODIFIED/DELETED carry a snapshot; ERROR carries the exception that
    terminated the watch coordinator.
    """

    type: EventType
    snapshot: PodSnapshot | None = None
    resource_version: str = ""
    error: BaseException | None = field(default=None, compare=False)

    @classmethod
    def added(cls, snapshot: PodSnapshot) -> LifecycleEvent:
        return cls(EventType.ADDED, snapshot, snapshot.resource_version)

    @classmethod
    def modified(cls, snapshot: PodSnapshot) -> LifecycleEvent:
        return cls(EventType.MODIFIED, snapshot, snapshot.resource_version)

    @classmethod
    def deleted(cls, snapshot: PodSnapshot) -> LifecycleEvent:
        return cls(EventType.DELETED, snapshot, snapshot.resource_version)

    @classmethod
    def failed(cls, error: BaseException, resource_version: str = "") -> LifecycleEvent:
        return cls(EventType.ERROR, None, resource_version, error)


@dataclass(frozen=True)
class RestartRecord:
    """A detected container restart, handed to the event emitter."""

    pod_uid: str
    namespace: str
    pod_name: str
    container_name: str
    container_kind: ContainerKind
    reason: str
    exit_code: int
    message: str = ""
    finished_at: datetime | None = None
    restart_count: int = 0


@dataclass(frozen=True)
class ObjectReference:
    """Involved-object reference attached to an emitted event."""

    kind: str
    namespace: str
    name: str
    uid: str
    api_version: str = "v1"
    resource_version: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind,
            "namespace": self.namespace,
            "name": self.name,
            "uid": self.uid,
            "apiVersion": self.api_version,
            "resourceVersion": self.resource_version,
        }
