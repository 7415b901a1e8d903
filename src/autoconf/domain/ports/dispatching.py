"""Ports for observing trigger entities."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from autoconf.domain.model import Trigger, TriggerEvent

type TriggerEventSink = Callable[[TriggerEvent], None]


@runtime_checkable
class EventDispatcher(Protocol):
    """Source of trigger lifecycle events and trigger enumeration.

    ``subscribe`` raises ``SubscriptionError`` when the filter cannot be
    honoured. ``enumerate`` returns one consistent snapshot of the triggers
    currently matching ``filter_expr``, in a stable order.
    """

    def subscribe(self, filter_expr: str, sink: TriggerEventSink) -> None: ...

    def unsubscribe(self, sink: TriggerEventSink) -> None: ...

    def enumerate(self, filter_expr: str) -> tuple[Trigger, ...]: ...


__all__ = ["EventDispatcher", "TriggerEventSink"]
