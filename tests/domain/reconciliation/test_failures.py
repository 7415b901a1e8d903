from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from autoconf.adapters.memory import InMemoryRecordStore
from autoconf.domain.errors import MalformedTemplateError, StoreUnavailableError
from autoconf.domain.model import Multiplicity
from autoconf.domain.reconciliation import Reconciler, RecordOperation
from tests.helpers.triggers import make_policy, register_producers

if TYPE_CHECKING:
    from autoconf.adapters.registry import InMemoryTriggerRegistry

RECONCILER_LOGGER = "autoconf.domain.reconciliation.reconciler"


def test_malformed_template_creates_nothing(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
    caplog: pytest.LogCaptureFixture,
) -> None:
    register_producers(registry, 2)

    with caplog.at_level(logging.WARNING, logger=RECONCILER_LOGGER):
        outcome = reconciler.apply_policy(make_policy(templates=("a=ok", "broken")))

    assert outcome.created == 0
    assert [failure.operation for failure in outcome.failures] == [
        RecordOperation.CREATE,
        RecordOperation.CREATE,
    ]
    assert all(isinstance(failure.error, MalformedTemplateError) for failure in outcome.failures)
    assert store.calls == []
    assert "key=value" in caplog.text


def test_malformed_template_leaves_existing_records_untouched(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    register_producers(registry, 2)
    reconciler.apply_policy(make_policy())
    before = {
        record.record_id: store.properties_of(record.record_id) for record in store.list_records()
    }

    outcome = reconciler.apply_policy(make_policy(templates=("broken",)))

    assert [failure.trigger_id for failure in outcome.failures] == ["producer-1", "producer-2"]
    assert {
        record.record_id: store.properties_of(record.record_id) for record in store.list_records()
    } == before
    assert len(reconciler.records) == 2


def test_update_failure_keeps_mapping_and_is_repaired_by_resync(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    register_producers(registry, 1)
    reconciler.apply_policy(make_policy())
    (record,) = reconciler.records
    store.fail_on.add(RecordOperation.UPDATE)

    registry.modify(
        "producer-1",
        {"service.factoryPid": "com.example.Producer", "service.pid": "P1b"},
    )

    assert store.properties_of(record.record_id)["b"] == "created for P1"
    assert reconciler.records == (record,)

    store.fail_on.clear()
    outcome = reconciler.resync()

    assert outcome.updated == 1
    assert store.properties_of(record.record_id)["b"] == "created for P1b"


def test_delete_failure_keeps_mapping_entry(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    register_producers(registry, 2)
    reconciler.apply_policy(make_policy())
    store.fail_on.add(RecordOperation.DELETE)

    registry.unregister("producer-1")

    assert "producer-1" in reconciler.matched
    assert len(store) == 2

    store.fail_on.clear()
    outcome = reconciler.resync()

    assert outcome.deleted == 1
    assert reconciler.matched == ("producer-2",)
    assert len(store) == 1


def test_failed_initial_update_removes_created_record(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    register_producers(registry, 2)
    store.fail_on.add(RecordOperation.UPDATE)

    outcome = reconciler.apply_policy(make_policy())

    assert outcome.created == 0
    assert outcome.deleted == 2
    assert len(outcome.failures) == 2
    assert len(store) == 0
    assert reconciler.records == ()


def test_retired_records_are_deleted_on_next_operation(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    register_producers(registry, 3)
    reconciler.apply_policy(make_policy())
    store.fail_on.add(RecordOperation.DELETE)

    reconciler.apply_policy(make_policy(Multiplicity.SHARED_LAZY))
    assert len(reconciler.records) == 3

    store.fail_on.clear()
    outcome = reconciler.resync()

    assert outcome.deleted == 2
    assert len(reconciler.records) == 1
    assert len(store) == 1


def test_failed_eager_creation_waits_for_next_event(
    registry: InMemoryTriggerRegistry,
    store: InMemoryRecordStore,
    reconciler: Reconciler,
) -> None:
    store.fail_on.add(RecordOperation.CREATE)

    outcome = reconciler.apply_policy(make_policy(Multiplicity.SHARED_EAGER))

    assert isinstance(outcome.failures[0].error, StoreUnavailableError)
    assert outcome.failures[0].trigger_id is None
    assert len(store) == 0

    store.fail_on.clear()
    register_producers(registry, 1)

    assert len(store) == 1


def test_injected_logger_receives_messages(
    registry: InMemoryTriggerRegistry,
    caplog: pytest.LogCaptureFixture,
) -> None:
    store = InMemoryRecordStore(fail_on=[RecordOperation.CREATE])
    reconciler = Reconciler(
        dispatcher=registry, store=store, logger=logging.getLogger("tests.reconciler")
    )
    register_producers(registry, 1)

    with caplog.at_level(logging.WARNING, logger="tests.reconciler"):
        reconciler.apply_policy(make_policy())

    assert [record.name for record in caplog.records] == ["tests.reconciler"]
    assert caplog.records[0].levelno == logging.WARNING
