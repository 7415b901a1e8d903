"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from autoconf.adapters.registry import InMemoryTriggerRegistry
from autoconf.adapters.sqlalchemy import SqlAlchemyRecordStore, is_started, startup
from autoconf.domain.errors import StoreUnavailableError
from autoconf.domain.reconciliation import Reconciler
from autoconf.domain.templating import AggregateView, resolve_templates

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

    from autoconf.domain.model import ManagedRecord, Policy, Properties, Trigger
    from autoconf.domain.ports import EventDispatcher, ManagedRecordStore, RecordCatalog
    from autoconf.domain.reconciliation import ReconcileOutcome


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SnapshotResult:
    outcome: ReconcileOutcome
    records: tuple[ManagedRecord, ...]


@dataclass(frozen=True, slots=True)
class RenderedProperties:
    """Resolved properties; ``trigger_id`` is None for the aggregate view."""

    trigger_id: str | None
    properties: Properties


def default_record_store(*, database_uri: str | None = None) -> SqlAlchemyRecordStore:
    """Return a SQLAlchemy store, starting the adapter on first use."""

    if not is_started():
        startup(database_uri=database_uri)
    return SqlAlchemyRecordStore()


def build_reconciler(
    *,
    dispatcher: EventDispatcher | None = None,
    store: ManagedRecordStore | None = None,
    logger: logging.Logger | None = None,
) -> Reconciler:
    """Wire a reconciler to the given adapters, defaulting to the in-process ones."""

    return Reconciler(
        dispatcher=InMemoryTriggerRegistry() if dispatcher is None else dispatcher,
        store=default_record_store() if store is None else store,
        logger=logger,
    )


def build_registry(triggers: Iterable[Trigger]) -> InMemoryTriggerRegistry:
    registry = InMemoryTriggerRegistry()
    for trigger in triggers:
        registry.register(trigger.trigger_id, trigger.attributes)
    return registry


def render_properties(
    policy: Policy,
    triggers: Iterable[Trigger],
    *,
    aggregate: bool = False,
) -> list[RenderedProperties]:
    """Resolve the policy templates without touching any store.

    Only triggers matching the policy filter are considered. With ``aggregate``
    a single entry is rendered against the aggregate view of all of them.
    """

    matched = build_registry(triggers).enumerate(policy.filter)
    if aggregate:
        view = AggregateView(matched)
        return [RenderedProperties(None, resolve_templates(policy.property_templates, view))]
    templates = policy.property_templates
    return [
        RenderedProperties(trigger.trigger_id, resolve_templates(templates, trigger))
        for trigger in matched
    ]


def reconcile_snapshot(
    policy: Policy,
    triggers: Iterable[Trigger],
    store: RecordCatalog,
    *,
    replace_existing: bool = True,
) -> SnapshotResult:
    """Run one activation of ``policy`` against a fixed set of triggers.

    A fresh reconciler owns no records, so with ``replace_existing`` the records
    a previous run left in ``store`` for the policy's target are deleted first.
    """

    if replace_existing:
        _purge_target(store, policy.target_identity)

    registry = build_registry(triggers)
    reconciler = build_reconciler(dispatcher=registry, store=store)
    log.info(
        "Starting reconciliation: target=%s, multiplicity=%s, triggers=%s",
        policy.target_identity,
        policy.multiplicity,
        len(registry.triggers),
    )
    outcome = reconciler.apply_policy(policy)
    log.info(
        f"Finished reconciliation: created={outcome.created}, updated={outcome.updated}, "
        f"deleted={outcome.deleted}, failures={len(outcome.failures)}"
    )
    return SnapshotResult(outcome=outcome, records=reconciler.records)


def list_stored_records(
    store: RecordCatalog | None = None,
    *,
    target_identity: str | None = None,
) -> tuple[ManagedRecord, ...]:
    effective_store = default_record_store() if store is None else store
    return effective_store.list_records(target_identity=target_identity)


def _purge_target(store: RecordCatalog, target_identity: str) -> None:
    for record in store.list_records(target_identity=target_identity):
        try:
            store.delete(record)
        except StoreUnavailableError as exc:
            log.warning("Unable to delete stale record %s: %s", record.record_id, exc)
        else:
            log.debug("Deleted stale record %s", record.record_id)
