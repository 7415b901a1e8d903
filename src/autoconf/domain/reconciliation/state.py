"""Mapping state kept by the reconciler, one variant per multiplicity family."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from autoconf.domain.templating import AggregateView

if TYPE_CHECKING:
    from autoconf.domain.model import ManagedRecord, Multiplicity, Trigger


@dataclass(slots=True)
class PerTriggerState:
    """One record per matched trigger, keyed by trigger id in creation order."""

    records: dict[str, ManagedRecord] = field(default_factory=dict[str, "ManagedRecord"])

    def all_records(self) -> tuple[ManagedRecord, ...]:
        return tuple(self.records.values())


@dataclass(slots=True)
class SharedState:
    """At most one record shared by every matched trigger."""

    matched: dict[str, Trigger] = field(default_factory=dict[str, "Trigger"])
    record: ManagedRecord | None = None

    def view(self) -> AggregateView:
        return AggregateView(self.matched.values())

    def all_records(self) -> tuple[ManagedRecord, ...]:
        return () if self.record is None else (self.record,)


type MappingState = PerTriggerState | SharedState


def empty_state(multiplicity: Multiplicity) -> MappingState:
    return SharedState() if multiplicity.is_shared else PerTriggerState()
