"""Restart event emitter.

Turns a RestartRecord into a core/v1 Event attached to the restarted pod and
submits it through the cluster client.

* Never raises: submission failures are logged and counted, then dropped.
* No retry: a lost event must not stall detection for later pods.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Any

from kuberestart.cluster.client import ClusterClient
from kuberestart.errors import ObjectReferenceError
from kuberestart.models.pods import ObjectReference, PodSnapshot, RestartRecord
from kuberestart.observability.logging import get_logger
from kuberestart.observability.metrics import events_emitted_total

_log = get_logger("notifications.emitter")

DEFAULT_REASON = "ContainerRestart"
DEFAULT_COMPONENT = "kube-restart-monitor"


def format_message(record: RestartRecord) -> str:
    """Human-readable event message for *record*."""
    msg = (
        f"Container {record.container_name} in pod {record.namespace}/{record.pod_name} restarted.\n"
        f"Reason: {record.reason}, exit code: {record.exit_code}."
    )
    if record.message:
        msg += f"\nMessage: {record.message}"
    return msg


def event_name(pod_name: str, now_ns: int) -> str:
    """``<pod>.<hex nanoseconds>``, unique across rapid successive restarts."""
    return f"{pod_name}.{now_ns:x}"


def build_event_body(
    record: RestartRecord,
    reference: ObjectReference,
    reason: str = DEFAULT_REASON,
    component: str = DEFAULT_COMPONENT,
    now_ns: int | None = None,
) -> dict[str, Any]:
    """Build a ``CoreV1Event``-shaped dict for the events API."""
    if now_ns is None:
        now_ns = time.time_ns()
    observed_at = record.finished_at or datetime.fromtimestamp(now_ns / 1e9, tz=UTC)
    return {
        "apiVersion": "v1",
        "kind": "Event",
        "metadata": {
            "name": event_name(record.pod_name, now_ns),
            "namespace": record.namespace,
        },
        "involvedObject": reference.to_dict(),
        "reason": reason,
        "message": format_message(record),
        "firstTimestamp": observed_at,
        "lastTimestamp": observed_at,
        "count": 1,
        "type": "Warning",
        "source": {"component": component},
    }


def _fallback_reference(record: RestartRecord) -> ObjectReference | None:
    if not record.pod_name:
        return None
    return ObjectReference(
        kind="Pod",
        namespace=record.namespace,
        name=record.pod_name,
        uid=record.pod_uid,
    )


class EventEmitter:
    """Submits restart events to the cluster event sink, fire-and-forget."""

    def __init__(
        self,
        client: ClusterClient,
        reason: str = DEFAULT_REASON,
        component: str = DEFAULT_COMPONENT,
    ) -> None:
        self._client = client
        self._reason = reason
        self._component = component

    @property
    def reason(self) -> str:
        return self._reason

    async def emit(self, record: RestartRecord, snapshot: PodSnapshot) -> bool:
        """Submit one event for *record*.

        Returns:
            True  -- the event sink accepted the event.
            False -- reference resolution or submission failed (already logged).
        """
        try:
            reference: ObjectReference | None = self._client.get_reference(snapshot)
        except ObjectReferenceError as exc:
            _log.warning("reference_build_failed", pod=snapshot.key, error=str(exc))
            reference = _fallback_reference(record)
            if reference is None:
                _log.warning("restart_dropped", pod=snapshot.key, container=record.container_name)
                return False

        body = build_event_body(record, reference, reason=self._reason, component=self._component)
        _log.info(
            "container_restarted",
            namespace=record.namespace,
            pod=record.pod_name,
            container=record.container_name,
            container_kind=str(record.container_kind),
            reason=record.reason,
            exit_code=record.exit_code,
            restart_count=record.restart_count,
        )

        try:
            await self._client.create_event(record.namespace, body)
        except Exception as exc:  # noqa: BLE001
            _log.warning(
                "event_submit_failed",
                event_name=body["metadata"]["name"],
                namespace=record.namespace,
                error=str(exc),
            )
            events_emitted_total.labels(success="false").inc()
            return False

        events_emitted_total.labels(success="true").inc()
        return True
