"""Keep managed configuration records in line with the matched triggers.

The reconciler owns the mapping from triggers to managed records and is the
only party creating or deleting records. Every public operation runs as one
critical section, so policy changes and trigger events are applied strictly
one after another.

Store and template failures are isolated per record: they are logged,
reported in the returned ``ReconcileOutcome`` and leave the mapping exactly
as it was for that record. Nothing is retried automatically; the next event
or resync touching the record tries again.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from autoconf.domain.errors import MalformedTemplateError, StoreUnavailableError, SubscriptionError
from autoconf.domain.model import Multiplicity, TriggerUnregistered
from autoconf.domain.reconciliation.outcome import ReconcileOutcome, RecordOperation
from autoconf.domain.reconciliation.state import (
    MappingState,
    PerTriggerState,
    SharedState,
    empty_state,
)
from autoconf.domain.templating import resolve_templates

if TYPE_CHECKING:
    from collections.abc import Mapping

    from autoconf.domain.model import ManagedRecord, Policy, PropertyValue, Trigger, TriggerEvent
    from autoconf.domain.ports import EventDispatcher, ManagedRecordStore, TriggerEventSink
    from autoconf.domain.templating import PropertySource

log = logging.getLogger(__name__)


class Reconciler:
    """Apply a multiplicity policy to the triggers delivered by a dispatcher."""

    def __init__(
        self,
        *,
        dispatcher: EventDispatcher,
        store: ManagedRecordStore,
        logger: logging.Logger | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._store = store
        self._log = logger or log
        self._lock = threading.Lock()
        self._policy: Policy | None = None
        self._state: MappingState = PerTriggerState()
        self._retired: list[ManagedRecord] = []
        self._sink: TriggerEventSink = self.handle
        self._subscribed = False

    # Accessors ---------------------------------------------------------------

    @property
    def policy(self) -> Policy | None:
        return self._policy

    @property
    def state(self) -> MappingState:
        """The live mapping; it keeps changing while events are handled."""

        with self._lock:
            return self._state

    @property
    def records(self) -> tuple[ManagedRecord, ...]:
        """Every record currently owned, including ones awaiting deletion."""

        with self._lock:
            return (*self._state.all_records(), *self._retired)

    @property
    def matched(self) -> tuple[str, ...]:
        """Ids of the triggers the current mapping accounts for."""

        with self._lock:
            if isinstance(self._state, SharedState):
                return tuple(self._state.matched)
            return tuple(self._state.records)

    def route_events(self, sink: TriggerEventSink) -> None:
        """Subscribe ``sink`` instead of ``handle`` (for example an event queue)."""

        with self._lock:
            if self._subscribed:
                raise RuntimeError("Cannot reroute events of an active reconciler")
            self._sink = sink

    # Operations --------------------------------------------------------------

    def apply_policy(self, policy: Policy) -> ReconcileOutcome:
        """Activate ``policy`` or replace the active one and re-derive all records.

        Raises ``SubscriptionError`` when the dispatcher rejects the filter; the
        reconciler is inactive afterwards.
        """

        with self._lock:
            outcome = ReconcileOutcome()
            self._flush_retired(outcome)
            previous = self._policy
            filter_changed = previous is None or previous.filter != policy.filter

            if filter_changed or not previous.same_target(policy):
                self._release_all(outcome)
                self._state = empty_state(policy.multiplicity)
                if filter_changed:
                    self._resubscribe(policy.filter)

            triggers = self._dispatcher.enumerate(policy.filter)
            if previous is not None and previous.multiplicity != policy.multiplicity:
                self._convert_state(policy.multiplicity, triggers, outcome)

            self._policy = policy
            self._rederive(triggers, outcome)
            self._log.info(
                "Applied policy for %s (%s): matched=%s, created=%s, updated=%s, deleted=%s, "
                "failures=%s",
                policy.target_identity,
                policy.multiplicity,
                len(triggers),
                outcome.created,
                outcome.updated,
                outcome.deleted,
                len(outcome.failures),
            )
            return outcome

    def handle(self, event: TriggerEvent) -> ReconcileOutcome:
        """Process one trigger lifecycle event."""

        with self._lock:
            outcome = ReconcileOutcome()
            if self._policy is None:
                self._log.debug("Ignoring %s: no active policy", event.kind)
                return outcome

            trigger = event.trigger
            state = self._state
            if isinstance(event, TriggerUnregistered):
                if isinstance(state, PerTriggerState):
                    if trigger.trigger_id in state.records:
                        self._drop_own(state, trigger.trigger_id, outcome)
                elif state.matched.pop(trigger.trigger_id, None) is not None:
                    self._sync_shared(state, outcome)
                return outcome

            if isinstance(state, PerTriggerState):
                self._upsert_own(state, trigger, outcome)
            else:
                state.matched[trigger.trigger_id] = trigger
                self._sync_shared(state, outcome)
            return outcome

    def resync(self) -> ReconcileOutcome:
        """Re-derive the mapping from a fresh enumeration under the active policy."""

        with self._lock:
            outcome = ReconcileOutcome()
            if self._policy is None:
                return outcome
            self._flush_retired(outcome)
            self._rederive(self._dispatcher.enumerate(self._policy.filter), outcome)
            return outcome

    def deactivate(self) -> ReconcileOutcome:
        """Delete every owned record and stop listening for events."""

        with self._lock:
            outcome = ReconcileOutcome()
            self._flush_retired(outcome)
            self._release_all(outcome)
            if self._subscribed:
                self._dispatcher.unsubscribe(self._sink)
                self._subscribed = False
            self._policy = None
            self._state = PerTriggerState()
            self._log.info(
                "Deactivated: deleted=%s, failures=%s", outcome.deleted, len(outcome.failures)
            )
            return outcome

    # Mapping transitions -----------------------------------------------------

    def _resubscribe(self, filter_expr: str) -> None:
        if self._subscribed:
            self._dispatcher.unsubscribe(self._sink)
            self._subscribed = False
        try:
            self._dispatcher.subscribe(filter_expr, self._sink)
        except SubscriptionError:
            self._policy = None
            self._log.error("Unable to subscribe with filter %s", filter_expr)  # noqa: TRY400
            raise
        self._subscribed = True

    def _release_all(self, outcome: ReconcileOutcome) -> None:
        for record in self._state.all_records():
            self._retire(record, outcome)
        self._state = PerTriggerState()

    def _convert_state(
        self,
        multiplicity: Multiplicity,
        triggers: tuple[Trigger, ...],
        outcome: ReconcileOutcome,
    ) -> None:
        state = self._state
        if isinstance(state, PerTriggerState) and multiplicity.is_shared:
            records = state.all_records()
            survivor = records[0] if records else None
            for record in records[1:]:
                self._retire(record, outcome)
            self._state = SharedState(record=survivor)
        elif isinstance(state, SharedState) and not multiplicity.is_shared:
            converted = PerTriggerState()
            if state.record is not None:
                if triggers:
                    converted.records[triggers[0].trigger_id] = state.record
                else:
                    self._retire(state.record, outcome)
            self._state = converted

    def _rederive(self, triggers: tuple[Trigger, ...], outcome: ReconcileOutcome) -> None:
        state = self._state
        present = {trigger.trigger_id: trigger for trigger in triggers}
        if isinstance(state, PerTriggerState):
            for trigger in present.values():
                self._upsert_own(state, trigger, outcome)
            for trigger_id in [tid for tid in state.records if tid not in present]:
                self._drop_own(state, trigger_id, outcome)
        else:
            state.matched = present
            self._sync_shared(state, outcome)

    def _upsert_own(
        self, state: PerTriggerState, trigger: Trigger, outcome: ReconcileOutcome
    ) -> None:
        record = state.records.get(trigger.trigger_id)
        if record is None:
            created = self._create(trigger, trigger.trigger_id, outcome)
            if created is not None:
                state.records[trigger.trigger_id] = created
        else:
            self._refresh(record, trigger, trigger.trigger_id, outcome)

    def _drop_own(self, state: PerTriggerState, trigger_id: str, outcome: ReconcileOutcome) -> None:
        if self._delete(state.records[trigger_id], trigger_id, outcome):
            del state.records[trigger_id]

    def _sync_shared(self, state: SharedState, outcome: ReconcileOutcome) -> None:
        policy = self._require_policy()
        if not state.matched and policy.multiplicity is Multiplicity.SHARED_LAZY:
            if state.record is not None and self._delete(state.record, None, outcome):
                state.record = None
            return

        view = state.view()
        if state.record is None:
            state.record = self._create(view, None, outcome)
        else:
            self._refresh(state.record, view, None, outcome)

    # Store operations --------------------------------------------------------

    def _create(
        self,
        context: PropertySource,
        trigger_id: str | None,
        outcome: ReconcileOutcome,
    ) -> ManagedRecord | None:
        policy = self._require_policy()
        try:
            properties = resolve_templates(policy.property_templates, context)
        except MalformedTemplateError as exc:
            self._log.warning("Couldn't parse the property templates: %s", exc)
            outcome.fail(trigger_id, RecordOperation.CREATE, exc)
            return None

        try:
            record = self._store.create(
                policy.target_identity,
                scope=policy.target_scope,
                is_template=policy.is_template,
            )
        except StoreUnavailableError as exc:
            self._log.warning("Couldn't create record for %s: %s", _describe(trigger_id), exc)
            outcome.fail(trigger_id, RecordOperation.CREATE, exc)
            return None

        if not same_properties(record.properties, properties):
            try:
                self._store.update(record, properties)
            except StoreUnavailableError as exc:
                self._log.warning(
                    "Couldn't initialise record %s for %s: %s",
                    record.record_id,
                    _describe(trigger_id),
                    exc,
                )
                outcome.fail(trigger_id, RecordOperation.CREATE, exc)
                self._retire(record, outcome)
                return None
            record.properties = properties

        outcome.created += 1
        self._log.debug("Created record %s for %s", record.record_id, _describe(trigger_id))
        return record

    def _refresh(
        self,
        record: ManagedRecord,
        context: PropertySource,
        trigger_id: str | None,
        outcome: ReconcileOutcome,
    ) -> None:
        policy = self._require_policy()
        try:
            properties = resolve_templates(policy.property_templates, context)
        except MalformedTemplateError as exc:
            self._log.warning("Couldn't parse the property templates: %s", exc)
            outcome.fail(trigger_id, RecordOperation.UPDATE, exc)
            return

        if same_properties(record.properties, properties):
            return
        try:
            self._store.update(record, properties)
        except StoreUnavailableError as exc:
            self._log.warning("Couldn't update record %s: %s", record.record_id, exc)
            outcome.fail(trigger_id, RecordOperation.UPDATE, exc)
            return
        record.properties = properties
        outcome.updated += 1
        self._log.debug("Updated record %s for %s", record.record_id, _describe(trigger_id))

    def _delete(
        self, record: ManagedRecord, trigger_id: str | None, outcome: ReconcileOutcome
    ) -> bool:
        try:
            self._store.delete(record)
        except StoreUnavailableError as exc:
            self._log.warning("Unable to delete record %s: %s", record.record_id, exc)
            outcome.fail(trigger_id, RecordOperation.DELETE, exc)
            return False
        outcome.deleted += 1
        self._log.debug("Deleted record %s for %s", record.record_id, _describe(trigger_id))
        return True

    def _retire(self, record: ManagedRecord, outcome: ReconcileOutcome) -> None:
        if not self._delete(record, None, outcome):
            self._retired.append(record)

    def _flush_retired(self, outcome: ReconcileOutcome) -> None:
        pending, self._retired = self._retired, []
        for record in pending:
            self._retire(record, outcome)

    def _require_policy(self) -> Policy:
        if self._policy is None:
            raise RuntimeError("Reconciler has no active policy")
        return self._policy


def _describe(trigger_id: str | None) -> str:
    return "shared view" if trigger_id is None else f"trigger {trigger_id}"


def same_properties(
    current: Mapping[str, PropertyValue], resolved: Mapping[str, PropertyValue]
) -> bool:
    """Compare property maps by value and type, so ``1``, ``1.0`` and ``True`` differ."""

    if current.keys() != resolved.keys():
        return False
    return all(_typed(current[key]) == _typed(resolved[key]) for key in current)


def _typed(value: PropertyValue) -> object:
    if value is None or isinstance(value, str | bool | int | float):
        return (type(value), value)
    return (list, tuple(_typed(item) for item in value))
