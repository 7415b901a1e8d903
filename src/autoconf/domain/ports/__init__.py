"""Domain port definitions for adapters."""

from __future__ import annotations

from .dispatching import EventDispatcher, TriggerEventSink
from .records import ManagedRecordStore, RecordCatalog

__all__ = [
    "EventDispatcher",
    "ManagedRecordStore",
    "RecordCatalog",
    "TriggerEventSink",
]
