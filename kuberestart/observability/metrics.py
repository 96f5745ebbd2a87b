"""Prometheus metrics for KubeRestart.

All collectors live on the default registry and are exposed through the
status API's ``/metrics`` mount.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

restarts_detected_total = Counter(
    "kuberestart_restarts_detected_total",
    "Container restarts detected from consecutive pod snapshots.",
    ["container_kind"],
)

events_emitted_total = Counter(
    "kuberestart_events_emitted_total",
    "Restart events submitted to the cluster event sink.",
    ["success"],
)

watch_relists_total = Counter(
    "kuberestart_watch_relists_total",
    "Full pod re-lists triggered by watch cursor expiry.",
)

watch_events_total = Counter(
    "kuberestart_watch_events_total",
    "Pod lifecycle events delivered to the consumer loop.",
    ["type"],
)

tracked_pods = Gauge(
    "kuberestart_tracked_pods",
    "Pods currently held in the state store.",
)
