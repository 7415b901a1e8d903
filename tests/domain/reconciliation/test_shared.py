from __future__ import annotations

from typing import TYPE_CHECKING

from autoconf.domain.model import Multiplicity
from autoconf.domain.reconciliation import SharedState
from tests.helpers.triggers import make_policy, register_producers

if TYPE_CHECKING:
    from autoconf.adapters.memory import InMemoryRecordStore
    from autoconf.adapters.registry import InMemoryTriggerRegistry
    from autoconf.domain.reconciliation import Reconciler

AGGREGATE_TEMPLATES = ("pids={array:service.pid}", "count={count}", "kind=shared")


def _shared_properties(store: InMemoryRecordStore) -> dict[str, object]:
    (record,) = store.list_records()
    return dict(store.properties_of(record.record_id))


def test_lazy_has_no_record_without_matches(
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    outcome = reconciler.apply_policy(make_policy(Multiplicity.SHARED_LAZY))

    assert not outcome.changed
    assert len(store) == 0
    assert reconciler.records == ()


def test_lazy_creates_single_record_for_all_matches(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    reconciler.apply_policy(make_policy(Multiplicity.SHARED_LAZY, templates=AGGREGATE_TEMPLATES))

    register_producers(registry, 3)

    assert len(store) == 1
    assert _shared_properties(store) == {
        "pids": ["P1", "P2", "P3"],
        "count": 3,
        "kind": "shared",
    }
    assert reconciler.matched == ("producer-1", "producer-2", "producer-3")


def test_lazy_deletes_record_when_last_match_leaves(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    trigger_ids = register_producers(registry, 2)
    reconciler.apply_policy(make_policy(Multiplicity.SHARED_LAZY, templates=AGGREGATE_TEMPLATES))

    registry.unregister(trigger_ids[0])
    assert _shared_properties(store)["pids"] == ["P2"]

    registry.unregister(trigger_ids[1])
    assert len(store) == 0
    state = reconciler.state
    assert isinstance(state, SharedState)
    assert state.record is None


def test_eager_creates_record_without_matches(
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    outcome = reconciler.apply_policy(
        make_policy(Multiplicity.SHARED_EAGER, templates=AGGREGATE_TEMPLATES)
    )

    assert outcome.created == 1
    assert _shared_properties(store) == {"pids": [], "count": 0, "kind": "shared"}


def test_eager_keeps_record_when_matches_leave(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    trigger_ids = register_producers(registry, 2)
    reconciler.apply_policy(make_policy(Multiplicity.SHARED_EAGER, templates=AGGREGATE_TEMPLATES))
    (record,) = reconciler.records

    for trigger_id in trigger_ids:
        registry.unregister(trigger_id)

    assert reconciler.records == (record,)
    assert _shared_properties(store)["count"] == 0


def test_modified_trigger_retemplates_shared_record(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    register_producers(registry, 2)
    reconciler.apply_policy(make_policy(Multiplicity.SHARED_LAZY, templates=AGGREGATE_TEMPLATES))

    registry.modify(
        "producer-2",
        {"service.factoryPid": "com.example.Producer", "service.pid": "P2b"},
    )

    assert _shared_properties(store)["pids"] == ["P1", "P2b"]


def test_shared_resync_is_idempotent(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    register_producers(registry, 4)
    reconciler.apply_policy(make_policy(Multiplicity.SHARED_EAGER, templates=AGGREGATE_TEMPLATES))
    calls_before = list(store.calls)

    outcome = reconciler.resync()

    assert not outcome.changed
    assert store.calls == calls_before


def test_singleton_target_reuses_named_record(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    register_producers(registry, 2)

    reconciler.apply_policy(
        make_policy(
            Multiplicity.SHARED_EAGER,
            templates=AGGREGATE_TEMPLATES,
            is_template=False,
            target_scope="bundle:consumer",
        )
    )

    (record,) = store.list_records()
    assert record.record_id == "com.example.Consumer@bundle:consumer"
    assert record.scope == "bundle:consumer"
    assert not record.is_template
