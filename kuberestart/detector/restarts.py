"""Restart detector: compares consecutive container status lists.

A restart fires for a container present in both snapshots (matched by name)
when its restart counter strictly increased.  Several restarts coalesced
between two observations still produce a single record.  Both functions are
pure: the same inputs always yield the same records.
"""

from __future__ import annotations

from collections.abc import Mapping

from kuberestart.models.pods import ContainerKind, ContainerState, PodSnapshot, RestartRecord
from kuberestart.observability.logging import get_logger

_log = get_logger("detector.restarts")


def diff_containers(
    pod: PodSnapshot,
    current: Mapping[str, ContainerState],
    previous: Mapping[str, ContainerState],
    kind: ContainerKind = ContainerKind.CONTAINER,
) -> list[RestartRecord]:
    """Return one RestartRecord per matched container whose counter increased."""
    records: list[RestartRecord] = []
    for name, state in current.items():
        prev = previous.get(name)
        if prev is None or state.restart_count <= prev.restart_count:
            continue

        termination = state.last_termination
        if termination is None:
            # Counter moved before lastState was populated.
            _log.info(
                "restart_without_termination",
                pod=pod.key,
                container=name,
                restart_count=state.restart_count,
            )
            continue

        records.append(
            RestartRecord(
                pod_uid=pod.uid,
                namespace=pod.namespace,
                pod_name=pod.name,
                container_name=name,
                container_kind=kind,
                reason=termination.reason,
                exit_code=termination.exit_code,
                message=termination.message,
                finished_at=termination.finished_at,
                restart_count=state.restart_count,
            )
        )
    return records


def detect_restarts(current: PodSnapshot, previous: PodSnapshot) -> list[RestartRecord]:
    """Diff regular containers, then init containers, of two snapshots of one pod."""
    return diff_containers(
        current, current.container_map(), previous.container_map(), ContainerKind.CONTAINER
    ) + diff_containers(
        current, current.init_container_map(), previous.init_container_map(), ContainerKind.INIT_CONTAINER
    )
