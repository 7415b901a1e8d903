"""Reconciliation core mapping matched triggers onto managed records.

Flow for every policy change or trigger event:
1) update the matched-trigger mapping for the active multiplicity
2) resolve the property templates against a trigger or the aggregate view
3) create, update or delete records through the record store port
"""

from __future__ import annotations

from .event_loop import PolicyChange, ReconcilerEventLoop
from .outcome import ReconcileFailure, ReconcileOutcome, RecordOperation
from .reconciler import Reconciler, same_properties
from .state import MappingState, PerTriggerState, SharedState, empty_state

__all__ = [
    "MappingState",
    "PerTriggerState",
    "PolicyChange",
    "ReconcileFailure",
    "ReconcileOutcome",
    "Reconciler",
    "ReconcilerEventLoop",
    "RecordOperation",
    "SharedState",
    "empty_state",
    "same_properties",
]
