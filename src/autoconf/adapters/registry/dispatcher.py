"""In-process trigger registry implementing the ``EventDispatcher`` port."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from autoconf.adapters.registry.filters import FilterNode, matches, parse_filter
from autoconf.domain.model import (
    Trigger,
    TriggerModified,
    TriggerRegistered,
    TriggerUnregistered,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from autoconf.domain.model import AttributeValue, TriggerEvent
    from autoconf.domain.ports import TriggerEventSink

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Subscription:
    filter_expr: str
    node: FilterNode
    sink: TriggerEventSink


class InMemoryTriggerRegistry:
    """Registry of live triggers that notifies filtered subscribers.

    Events are delivered synchronously on the caller's thread, after the
    registry lock has been released. A modification that makes a trigger
    enter or leave a subscriber's filter is delivered to that subscriber as a
    registration or an unregistration respectively.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._triggers: dict[str, Trigger] = {}
        self._subscriptions: list[_Subscription] = []

    @property
    def triggers(self) -> tuple[Trigger, ...]:
        with self._lock:
            return tuple(self._triggers.values())

    def get(self, trigger_id: str) -> Trigger | None:
        with self._lock:
            return self._triggers.get(trigger_id)

    # Trigger lifecycle -------------------------------------------------------

    def register(
        self, trigger_id: str, attributes: Mapping[str, AttributeValue] | None = None
    ) -> Trigger:
        trigger = Trigger(trigger_id=trigger_id, attributes=attributes or {})
        with self._lock:
            if trigger_id in self._triggers:
                raise ValueError(f"Trigger already registered: {trigger_id}")
            self._triggers[trigger_id] = trigger
            deliveries = [
                (subscription.sink, TriggerRegistered(trigger))
                for subscription in self._subscriptions
                if matches(subscription.node, trigger.attributes)
            ]
        self._deliver(deliveries)
        return trigger

    def modify(self, trigger_id: str, attributes: Mapping[str, AttributeValue]) -> Trigger:
        with self._lock:
            previous = self._require(trigger_id)
            trigger = previous.with_attributes(attributes)
            self._triggers[trigger_id] = trigger
            deliveries: list[tuple[TriggerEventSink, TriggerEvent]] = []
            for subscription in self._subscriptions:
                was_matched = matches(subscription.node, previous.attributes)
                is_matched = matches(subscription.node, trigger.attributes)
                if was_matched and is_matched:
                    deliveries.append((subscription.sink, TriggerModified(trigger)))
                elif is_matched:
                    deliveries.append((subscription.sink, TriggerRegistered(trigger)))
                elif was_matched:
                    deliveries.append((subscription.sink, TriggerUnregistered(trigger)))
        self._deliver(deliveries)
        return trigger

    def unregister(self, trigger_id: str) -> Trigger:
        with self._lock:
            trigger = self._require(trigger_id)
            del self._triggers[trigger_id]
            deliveries = [
                (subscription.sink, TriggerUnregistered(trigger))
                for subscription in self._subscriptions
                if matches(subscription.node, trigger.attributes)
            ]
        self._deliver(deliveries)
        return trigger

    # EventDispatcher ---------------------------------------------------------

    def subscribe(self, filter_expr: str, sink: TriggerEventSink) -> None:
        node = parse_filter(filter_expr)
        with self._lock:
            self._subscriptions.append(_Subscription(filter_expr, node, sink))
        log.debug("Subscribed %r with filter %s", sink, filter_expr)

    def unsubscribe(self, sink: TriggerEventSink) -> None:
        with self._lock:
            self._subscriptions = [
                subscription for subscription in self._subscriptions if subscription.sink != sink
            ]

    def enumerate(self, filter_expr: str) -> tuple[Trigger, ...]:
        node = parse_filter(filter_expr)
        with self._lock:
            return tuple(
                trigger for trigger in self._triggers.values() if matches(node, trigger.attributes)
            )

    def _require(self, trigger_id: str) -> Trigger:
        trigger = self._triggers.get(trigger_id)
        if trigger is None:
            raise KeyError(f"Unknown trigger: {trigger_id}")
        return trigger

    @staticmethod
    def _deliver(deliveries: list[tuple[TriggerEventSink, TriggerEvent]]) -> None:
        for sink, event in deliveries:
            sink(event)
