"""Trigger lifecycle events delivered by an event dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from autoconf.domain.model.enums import TriggerEventKind

if TYPE_CHECKING:
    from autoconf.domain.model.trigger import Trigger


@dataclass(frozen=True, slots=True)
class TriggerRegistered:
    trigger: Trigger
    kind: Literal[TriggerEventKind.REGISTERED] = TriggerEventKind.REGISTERED


@dataclass(frozen=True, slots=True)
class TriggerModified:
    trigger: Trigger
    kind: Literal[TriggerEventKind.MODIFIED] = TriggerEventKind.MODIFIED


@dataclass(frozen=True, slots=True)
class TriggerUnregistered:
    trigger: Trigger
    kind: Literal[TriggerEventKind.UNREGISTERED] = TriggerEventKind.UNREGISTERED


type TriggerEvent = TriggerRegistered | TriggerModified | TriggerUnregistered
