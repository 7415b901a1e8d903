"""Trigger entities observed by the reconciler."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

type AttributeValue = str | int | float | bool | Sequence[str]


def _freeze(attributes: Mapping[str, AttributeValue]) -> Mapping[str, AttributeValue]:
    frozen: dict[str, AttributeValue] = {}
    for key, value in attributes.items():
        if isinstance(value, list):
            frozen[key] = tuple(value)
        else:
            frozen[key] = value
    return MappingProxyType(frozen)


@dataclass(frozen=True, slots=True)
class Trigger:
    """Snapshot of an external entity: a stable identity plus its attributes.

    Triggers are owned by the event dispatcher. A modification produces a new
    snapshot with the same ``trigger_id``.
    """

    trigger_id: str
    attributes: Mapping[str, AttributeValue] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", _freeze(self.attributes))

    def get_property(self, name: str) -> object | None:
        return self.attributes.get(name)

    def with_attributes(self, attributes: Mapping[str, AttributeValue]) -> Trigger:
        """Return a new snapshot of this trigger carrying ``attributes``."""

        return Trigger(trigger_id=self.trigger_id, attributes=attributes)
