"""Property lookup contract shared by triggers and aggregate views."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final, Protocol, runtime_checkable

MISSING_PLACEHOLDER: Final[str] = "null"


@runtime_checkable
class PropertySource(Protocol):
    """Anything a template reference can be resolved against."""

    def get_property(self, name: str) -> object | None: ...


def to_text(value: object | None) -> str:
    """Return the string form used when a value is embedded in text."""

    if value is None:
        return MISSING_PLACEHOLDER
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, Sequence):
        return ",".join(to_text(item) for item in value)
    return str(value)
