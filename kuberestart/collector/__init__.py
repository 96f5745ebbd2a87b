"""Collector package for KubeRestart.

Provides the pod watch coordinator that turns the cluster's list+watch
stream into an ordered, resumable sequence of LifecycleEvents.

Submodules
----------
watcher -- WatchCoordinator: initial list, randomised watch timeouts,
           bookmark handling and relist on cursor expiry.
"""

from kuberestart.collector.watcher import (
    QUEUE_MAXSIZE,
    WATCH_TIMEOUT_BASE_S,
    WatchCoordinator,
    WatchState,
    new_event_queue,
    watch_timeout,
)

__all__ = [
    "QUEUE_MAXSIZE",
    "WATCH_TIMEOUT_BASE_S",
    "WatchCoordinator",
    "WatchState",
    "new_event_queue",
    "watch_timeout",
]
