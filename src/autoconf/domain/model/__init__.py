"""Domain model for triggers, policies and managed records."""

from __future__ import annotations

from .enums import Multiplicity, TriggerEventKind
from .events import TriggerEvent, TriggerModified, TriggerRegistered, TriggerUnregistered
from .policy import Policy
from .record import (
    ManagedRecord,
    Properties,
    PropertyValue,
    singleton_record_id,
    template_record_id,
)
from .trigger import AttributeValue, Trigger

__all__ = [
    "AttributeValue",
    "ManagedRecord",
    "Multiplicity",
    "Policy",
    "Properties",
    "PropertyValue",
    "Trigger",
    "TriggerEvent",
    "TriggerEventKind",
    "TriggerModified",
    "TriggerRegistered",
    "TriggerUnregistered",
    "singleton_record_id",
    "template_record_id",
]
