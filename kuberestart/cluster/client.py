"""Cluster client capability and its kubernetes-asyncio implementation.

The watch coordinator and event emitter only see the ``ClusterClient``
protocol, so tests substitute an in-memory fake.  ``KubernetesClusterClient``
is the production implementation: it converts ``V1Pod`` objects into
``PodSnapshot`` values and translates ``ApiException`` into the KubeRestart
error hierarchy (HTTP 410 -> CursorExpiredError, anything else ->
ClusterAPIError).
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio import watch as k8s_watch  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kuberestart.errors import ClusterAPIError, CursorExpiredError, ObjectReferenceError
from kuberestart.models.config import ClusterConfig
from kuberestart.models.pods import (
    ContainerState,
    EventType,
    ObjectReference,
    PodSnapshot,
    TerminationRecord,
    WatchStatus,
)
from kuberestart.observability.logging import get_logger

_log = get_logger("cluster.client")


@dataclass(frozen=True)
class PodList:
    """Result of a full list: every pod plus the collection resource version."""

    items: list[PodSnapshot] = field(default_factory=list)
    resource_version: str = ""


@dataclass(frozen=True)
class WatchItem:
    """One decoded watch delivery.

    ``snapshot`` is None for BOOKMARK and ERROR items, and for payloads that
    are not Pods (``kind`` then names what was received).  Unrecognised
    watch types keep their raw string as ``type`` and carry no snapshot.
    """

    type: EventType | str
    snapshot: PodSnapshot | None = None
    resource_version: str = ""
    kind: str = "Pod"
    status: WatchStatus | None = None


class ClusterClient(Protocol):
    """Operations the restart monitor consumes from the control plane."""

    async def list_pods(self) -> PodList: ...

    def watch_pods(self, resource_version: str, timeout_seconds: int) -> AsyncGenerator[WatchItem, None]: ...

    async def create_event(self, namespace: str, body: dict[str, Any]) -> None: ...

    def get_reference(self, snapshot: PodSnapshot) -> ObjectReference: ...


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------


def _coerce_dt(value: object) -> datetime | None:
    """Return a UTC-aware datetime or None."""
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, str) and value:
        try:
            return _coerce_dt(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def _termination_from_obj(status: Any) -> TerminationRecord | None:
    last_state = getattr(status, "last_state", None)
    terminated = getattr(last_state, "terminated", None) if last_state is not None else None
    if terminated is None:
        return None
    return TerminationRecord(
        exit_code=int(getattr(terminated, "exit_code", 0) or 0),
        reason=str(getattr(terminated, "reason", "") or ""),
        message=str(getattr(terminated, "message", "") or ""),
        finished_at=_coerce_dt(getattr(terminated, "finished_at", None)),
    )


def _termination_from_raw(status: dict[str, Any]) -> TerminationRecord | None:
    last_state = status.get("lastState") or {}
    terminated = last_state.get("terminated") if isinstance(last_state, dict) else None
    if not isinstance(terminated, dict):
        return None
    return TerminationRecord(
        exit_code=int(terminated.get("exitCode", 0) or 0),
        reason=str(terminated.get("reason", "") or ""),
        message=str(terminated.get("message", "") or ""),
        finished_at=_coerce_dt(terminated.get("finishedAt")),
    )


def _containers_from_obj(statuses: Any) -> tuple[ContainerState, ...]:
    return tuple(
        ContainerState(
            name=str(s.name),
            restart_count=int(s.restart_count or 0),
            last_termination=_termination_from_obj(s),
        )
        for s in statuses or ()
    )


def _containers_from_raw(statuses: Any) -> tuple[ContainerState, ...]:
    if not isinstance(statuses, list):
        return ()
    return tuple(
        ContainerState(
            name=str(s.get("name", "")),
            restart_count=int(s.get("restartCount", 0) or 0),
            last_termination=_termination_from_raw(s),
        )
        for s in statuses
        if isinstance(s, dict)
    )


def snapshot_from_pod(obj: Any, raw: dict[str, Any] | None = None) -> PodSnapshot:
    """Build a PodSnapshot from a deserialized ``V1Pod``.

    Falls back to the raw watch dict (camelCase keys) when the object was not
    deserialized.
    """
    metadata = getattr(obj, "metadata", None) if obj is not None else None
    if metadata is not None:
        status = getattr(obj, "status", None)
        return PodSnapshot(
            uid=str(metadata.uid or ""),
            namespace=str(metadata.namespace or ""),
            name=str(metadata.name or ""),
            containers=_containers_from_obj(getattr(status, "container_statuses", None)),
            init_containers=_containers_from_obj(getattr(status, "init_container_statuses", None)),
            resource_version=str(metadata.resource_version or ""),
        )

    raw = raw or {}
    raw_meta = raw.get("metadata") or {}
    raw_status = raw.get("status") or {}
    return PodSnapshot(
        uid=str(raw_meta.get("uid", "")),
        namespace=str(raw_meta.get("namespace", "")),
        name=str(raw_meta.get("name", "")),
        containers=_containers_from_raw(raw_status.get("containerStatuses")),
        init_containers=_containers_from_raw(raw_status.get("initContainerStatuses")),
        resource_version=str(raw_meta.get("resourceVersion", "")),
    )


def build_reference(snapshot: PodSnapshot) -> ObjectReference:
    """Derive the involved-object reference for a pod snapshot.

    Raises:
        ObjectReferenceError: if the snapshot lacks a uid or name.
    """
    if not snapshot.uid or not snapshot.name:
        raise ObjectReferenceError(
            f"cannot reference pod {snapshot.namespace}/{snapshot.name!r} with uid {snapshot.uid!r}"
        )
    return ObjectReference(
        kind="Pod",
        namespace=snapshot.namespace,
        name=snapshot.name,
        uid=snapshot.uid,
        api_version="v1",
        resource_version=snapshot.resource_version,
    )


def _raw_rv(raw: Any) -> str:
    if not isinstance(raw, dict):
        return ""
    metadata = raw.get("metadata")
    if not isinstance(metadata, dict):
        return ""
    return str(metadata.get("resourceVersion", ""))


def _status_from_raw(raw: Any) -> WatchStatus:
    if not isinstance(raw, dict):
        return WatchStatus(code=500, reason="Unknown", message=str(raw))
    return WatchStatus(
        code=int(raw.get("code", 0) or 0),
        reason=str(raw.get("reason", "") or ""),
        message=str(raw.get("message", "") or ""),
    )


def _translate(exc: ApiException) -> Exception:
    status = int(getattr(exc, "status", 0) or 0)
    reason = str(getattr(exc, "reason", "") or "")
    if status == 410:
        return CursorExpiredError(reason or "resource version expired")
    return ClusterAPIError(status, reason)


_OBJECT_EVENT_TYPES = frozenset({EventType.ADDED, EventType.MODIFIED, EventType.DELETED})


def decode_watch_event(event: dict[str, Any]) -> WatchItem:
    """Convert a kubernetes-asyncio watch event dict into a WatchItem."""
    event_type = str(event.get("type", ""))
    raw = event.get("raw_object")
    obj = event.get("object")

    if event_type == EventType.ERROR:
        return WatchItem(type=EventType.ERROR, status=_status_from_raw(raw if raw is not None else obj))
    if event_type == EventType.BOOKMARK:
        return WatchItem(type=EventType.BOOKMARK, resource_version=_raw_rv(raw))

    kind = str(raw.get("kind", "")) if isinstance(raw, dict) else ""
    if event_type not in _OBJECT_EVENT_TYPES:
        return WatchItem(type=event_type, kind=kind or "Unknown")
    if kind and kind != "Pod":
        return WatchItem(type=EventType(event_type), kind=kind, resource_version=_raw_rv(raw))

    snapshot = snapshot_from_pod(obj, raw if isinstance(raw, dict) else None)
    return WatchItem(
        type=EventType(event_type),
        snapshot=snapshot,
        resource_version=snapshot.resource_version,
    )


# ---------------------------------------------------------------------------
# kubernetes-asyncio implementation
# ---------------------------------------------------------------------------


class KubernetesClusterClient:
    """ClusterClient backed by a kubernetes-asyncio ``ApiClient``."""

    def __init__(self, api_client: Any) -> None:
        self._api_client = api_client
        self._v1 = k8s_client.CoreV1Api(api_client)

    async def list_pods(self) -> PodList:
        try:
            result = await self._v1.list_pod_for_all_namespaces()
        except ApiException as exc:
            raise _translate(exc) from exc
        items = [snapshot_from_pod(pod) for pod in result.items or []]
        return PodList(items=items, resource_version=str(result.metadata.resource_version or ""))

    async def watch_pods(self, resource_version: str, timeout_seconds: int) -> AsyncGenerator[WatchItem, None]:
        w = k8s_watch.Watch()
        try:
            async with w.stream(
                self._v1.list_pod_for_all_namespaces,
                resource_version=resource_version,
                timeout_seconds=timeout_seconds,
                allow_watch_bookmarks=True,
            ) as stream:
                async for event in stream:
                    yield decode_watch_event(event)
        except ApiException as exc:
            raise _translate(exc) from exc

    async def create_event(self, namespace: str, body: dict[str, Any]) -> None:
        try:
            await self._v1.create_namespaced_event(namespace, body)
        except ApiException as exc:
            raise ClusterAPIError(int(exc.status or 0), str(exc.reason or "")) from exc

    def get_reference(self, snapshot: PodSnapshot) -> ObjectReference:
        return build_reference(snapshot)

    async def close(self) -> None:
        await self._api_client.close()


async def connect(config: ClusterConfig) -> KubernetesClusterClient:
    """Load credentials and return a connected KubernetesClusterClient.

    An explicit kubeconfig path wins; otherwise the in-cluster service account
    is tried before the default kubeconfig.  ``config.master`` overrides the
    API server URL from whichever source was loaded.
    """
    from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]

    if config.kubeconfig:
        await k8s_config.load_kube_config(config_file=config.kubeconfig)
        _log.info("k8s_client_configured", source="kubeconfig", path=config.kubeconfig)
    else:
        try:
            k8s_config.load_incluster_config()
            _log.info("k8s_client_configured", source="in_cluster")
        except k8s_config.ConfigException:
            await k8s_config.load_kube_config()
            _log.info("k8s_client_configured", source="default_kubeconfig")

    configuration = k8s_client.Configuration.get_default_copy()
    if config.master:
        configuration.host = config.master
    return KubernetesClusterClient(k8s_client.ApiClient(configuration=configuration))
