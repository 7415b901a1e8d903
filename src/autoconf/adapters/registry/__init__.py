"""In-memory trigger registry adapter with LDAP-style filters."""

from __future__ import annotations

from .dispatcher import InMemoryTriggerRegistry
from .filters import FilterNode, matches, parse_filter
from .schema import (
    InvalidSnapshotError,
    TriggerPayload,
    load_trigger_snapshot,
    parse_trigger_snapshot,
)

__all__ = [
    "FilterNode",
    "InMemoryTriggerRegistry",
    "InvalidSnapshotError",
    "TriggerPayload",
    "load_trigger_snapshot",
    "matches",
    "parse_filter",
    "parse_trigger_snapshot",
]
