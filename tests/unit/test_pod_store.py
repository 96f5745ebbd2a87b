"""Tests for kuberestart.cache.pod_store."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from kuberestart.cache.pod_store import PodStore
from kuberestart.errors import ClusterAPIError
from kuberestart.models.pods import EventType, LifecycleEvent, PodSnapshot


def _snap(uid: str, rv: str = "1", name: str = "p") -> PodSnapshot:
    return PodSnapshot(uid=uid, namespace="default", name=name, resource_version=rv)


class TestApply:
    def test_added_inserts_without_diff(self) -> None:
        store = PodStore()
        assert store.apply(LifecycleEvent.added(_snap("a"))) is None
        assert "a" in store
        assert len(store) == 1

    def test_modified_without_baseline_skips_diff(self) -> None:
        store = PodStore()
        assert store.apply(LifecycleEvent.modified(_snap("a"))) is None
        assert store.get("a") == _snap("a")

    def test_modified_with_baseline_returns_pair(self) -> None:
        store = PodStore()
        first = _snap("a", rv="1")
        second = _snap("a", rv="2")
        store.apply(LifecycleEvent.added(first))

        update = store.apply(LifecycleEvent.modified(second))

        assert update is not None
        assert update.current is second
        assert update.previous is first
        assert store.get("a") is second

    def test_readded_uid_replaces_without_diff(self) -> None:
        """ADDED for a known UID (after a relist) is an idempotent replace."""
        store = PodStore()
        store.apply(LifecycleEvent.added(_snap("a", rv="1")))

        assert store.apply(LifecycleEvent.added(_snap("a", rv="9"))) is None
        assert store.get("a").resource_version == "9"
        assert len(store) == 1

    def test_deleted_removes_entry(self) -> None:
        store = PodStore()
        store.apply(LifecycleEvent.added(_snap("a")))

        assert store.apply(LifecycleEvent.deleted(_snap("a"))) is None
        assert "a" not in store
        assert store.get("a") is None

    def test_deleted_unknown_uid_is_noop(self) -> None:
        store = PodStore()
        assert store.apply(LifecycleEvent.deleted(_snap("missing"))) is None
        assert len(store) == 0

    def test_error_event_leaves_store_untouched(self) -> None:
        store = PodStore()
        store.apply(LifecycleEvent.added(_snap("a")))
        assert store.apply(LifecycleEvent.failed(ClusterAPIError(500, "boom"))) is None
        assert list(store.uids()) == ["a"]

    def test_same_name_new_uid_has_no_baseline(self) -> None:
        store = PodStore()
        store.apply(LifecycleEvent.added(_snap("old", name="web-0")))
        store.apply(LifecycleEvent.deleted(_snap("old", name="web-0")))

        assert store.apply(LifecycleEvent.modified(_snap("new", name="web-0"))) is None


# ---------------------------------------------------------------------------
# Fold property
# ---------------------------------------------------------------------------

_event_types = st.sampled_from([EventType.ADDED, EventType.MODIFIED, EventType.DELETED])
_events = st.lists(
    st.tuples(_event_types, st.sampled_from(["a", "b", "c"]), st.integers(min_value=1, max_value=1000)),
    max_size=40,
)


@given(_events)
def test_store_equals_upsert_remove_fold(script: list[tuple[EventType, str, int]]) -> None:
    store = PodStore()
    expected: dict[str, PodSnapshot] = {}

    for event_type, uid, rv in script:
        snapshot = _snap(uid, rv=str(rv))
        store.apply(LifecycleEvent(event_type, snapshot, snapshot.resource_version))
        if event_type == EventType.DELETED:
            expected.pop(uid, None)
        else:
            expected[uid] = snapshot

    assert {uid: store.get(uid) for uid in store.uids()} == expected
