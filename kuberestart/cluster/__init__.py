"""Cluster access layer for KubeRestart.

Submodules
----------
client -- ClusterClient protocol, KubernetesClusterClient (kubernetes-asyncio),
          V1Pod -> PodSnapshot conversion and involved-object references.
"""

from kuberestart.cluster.client import (
    ClusterClient,
    KubernetesClusterClient,
    PodList,
    WatchItem,
    build_reference,
    connect,
    decode_watch_event,
    snapshot_from_pod,
)

__all__ = [
    "ClusterClient",
    "KubernetesClusterClient",
    "PodList",
    "WatchItem",
    "build_reference",
    "connect",
    "decode_watch_event",
    "snapshot_from_pod",
]
