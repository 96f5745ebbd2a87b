"""Core data structures for KubeRestart."""

from kuberestart.models.config import KubeRestartConfig
from kuberestart.models.pods import (
    ContainerKind,
    ContainerState,
    EventType,
    LifecycleEvent,
    ObjectReference,
    PodSnapshot,
    RestartRecord,
    TerminationRecord,
    WatchStatus,
)

__all__ = [
    "ContainerKind",
    "ContainerState",
    "EventType",
    "KubeRestartConfig",
    "LifecycleEvent",
    "ObjectReference",
    "PodSnapshot",
    "RestartRecord",
    "TerminationRecord",
    "WatchStatus",
]
