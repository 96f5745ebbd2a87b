"""In-memory UID -> PodSnapshot store."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from kuberestart.models.pods import EventType, LifecycleEvent, PodSnapshot
from kuberestart.observability.logging import get_logger

_log = get_logger("cache.pod_store")


@dataclass(frozen=True)
class PodUpdate:
    """A MODIFIED snapshot paired with the snapshot it replaced."""

    current: PodSnapshot
    previous: PodSnapshot


class PodStore:
    """Latest snapshot per pod UID.

    * ADDED upserts and never produces a diff pair.  A repeated ADDED for a
      known UID only happens after a relist and replaces the snapshot.
    * MODIFIED upserts and returns a PodUpdate when a baseline existed.
    * DELETED removes the entry.
    """

    def __init__(self) -> None:
        self._pods: dict[str, PodSnapshot] = {}

    def apply(self, event: LifecycleEvent) -> PodUpdate | None:
        snapshot = event.snapshot
        if snapshot is None:
            return None

        if event.type == EventType.DELETED:
            self._pods.pop(snapshot.uid, None)
            return None

        previous = self._pods.get(snapshot.uid)
        self._pods[snapshot.uid] = snapshot

        if event.type != EventType.MODIFIED:
            if previous is not None:
                _log.debug("pod_resynced", pod=snapshot.key, uid=snapshot.uid)
            return None
        if previous is None:
            return None
        return PodUpdate(current=snapshot, previous=previous)

    def get(self, uid: str) -> PodSnapshot | None:
        return self._pods.get(uid)

    def uids(self) -> Iterator[str]:
        return iter(self._pods)

    def __len__(self) -> int:
        return len(self._pods)

    def __contains__(self, uid: object) -> bool:
        return uid in self._pods
