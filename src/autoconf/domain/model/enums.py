"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Multiplicity(StrEnum):
    """How many managed records a policy maintains for its matched triggers."""

    PER_TRIGGER = "per_trigger"
    SHARED_LAZY = "shared_lazy"
    SHARED_EAGER = "shared_eager"

    @property
    def is_shared(self) -> bool:
        return self is not Multiplicity.PER_TRIGGER


class TriggerEventKind(StrEnum):
    REGISTERED = "registered"
    MODIFIED = "modified"
    UNREGISTERED = "unregistered"
