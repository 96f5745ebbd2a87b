"""State store for KubeRestart.

Holds the last-known PodSnapshot per pod UID.  Owned exclusively by the
consumer loop; nothing else holds a long-lived reference to its entries.

Submodules:
    pod_store -- PodStore: applies lifecycle events and yields diff pairs.
"""

from kuberestart.cache.pod_store import PodStore, PodUpdate

__all__ = ["PodStore", "PodUpdate"]
