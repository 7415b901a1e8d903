"""Managed configuration records."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field

type PropertyValue = str | int | float | bool | Sequence[str] | None
type Properties = dict[str, PropertyValue]


@dataclass(eq=False, slots=True, kw_only=True)
class ManagedRecord:
    """Handle to a configuration persisted by a managed record store.

    ``properties`` mirrors what the reconciler last pushed successfully; a
    freshly created record carries whatever the store already held.
    """

    record_id: str
    target_identity: str
    scope: str | None = None
    is_template: bool = True
    properties: Properties = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"ManagedRecord({self.record_id!r})"


def singleton_record_id(target_identity: str, scope: str | None) -> str:
    """Return the id of the single record kept for a non-template target."""

    return target_identity if scope is None else f"{target_identity}@{scope}"


def template_record_id(target_identity: str) -> str:
    """Return a fresh id for one more instance of a template target."""

    return f"{target_identity}.{uuid.uuid4()}"
