from __future__ import annotations

from autoconf.adapters.memory import InMemoryRecordStore
from autoconf.app import build_reconciler, reconcile_snapshot, render_properties
from autoconf.domain.model import Multiplicity, Trigger
from autoconf.domain.reconciliation import Reconciler
from tests.helpers.triggers import make_policy

TRIGGERS = (
    Trigger("svc.1", {"service.factoryPid": "com.example.Producer", "service.pid": "A"}),
    Trigger("svc.2", {"service.factoryPid": "com.example.Other", "service.pid": "B"}),
    Trigger("svc.3", {"service.factoryPid": "com.example.Producer", "service.pid": "C"}),
)


def test_render_per_trigger_skips_unmatched() -> None:
    rendered = render_properties(make_policy(), TRIGGERS)

    assert [(entry.trigger_id, entry.properties) for entry in rendered] == [
        ("svc.1", {"a": "bla", "b": "created for A"}),
        ("svc.3", {"a": "bla", "b": "created for C"}),
    ]


def test_render_aggregate() -> None:
    policy = make_policy(templates=("pids={concat:service.pid:[%,]}", "count={count}"))

    (rendered,) = render_properties(policy, TRIGGERS, aggregate=True)

    assert rendered.trigger_id is None
    assert rendered.properties == {"pids": "A,C,", "count": 2}


def test_reconcile_snapshot_replaces_previous_run() -> None:
    store = InMemoryRecordStore()

    first = reconcile_snapshot(make_policy(), TRIGGERS, store)
    second = reconcile_snapshot(make_policy(), TRIGGERS[:1], store)

    assert first.outcome.created == 2
    assert second.outcome.created == 1
    assert len(store) == 1
    assert second.records[0].record_id == store.list_records()[0].record_id


def test_reconcile_snapshot_can_keep_existing_records() -> None:
    store = InMemoryRecordStore()
    reconcile_snapshot(make_policy(Multiplicity.SHARED_EAGER), TRIGGERS, store)

    result = reconcile_snapshot(
        make_policy(Multiplicity.SHARED_EAGER), (), store, replace_existing=False
    )

    assert result.outcome.created == 1
    assert len(store) == 2


def test_build_reconciler_uses_given_adapters() -> None:
    store = InMemoryRecordStore()

    reconciler = build_reconciler(store=store)

    assert isinstance(reconciler, Reconciler)
    assert reconciler.apply_policy(make_policy(Multiplicity.SHARED_EAGER)).created == 1
    assert len(store) == 1
