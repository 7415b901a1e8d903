"""Aggregate view over every trigger currently matched by a shared policy.

Shared multiplicities template their single record against this view rather
than a single trigger. Besides the plain methods, the view understands three
reference directives so that templates can reach it:

- ``array:<attr>`` - list of the string form of ``attr`` per trigger
- ``concat:<attr>:<prefix>[<inner_prefix>%<inner_suffix>]<suffix>``
- ``count`` - number of matched triggers
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from autoconf.domain.templating.source import to_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from autoconf.domain.model import Trigger

ARRAY_DIRECTIVE: Final[str] = "array:"
CONCAT_DIRECTIVE: Final[str] = "concat:"
COUNT_DIRECTIVE: Final[str] = "count"

_CONCAT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"([^:\[%]+):([^:\[%]*)\[([^:\[%]*)%([^:\[%]*)\]([^:\[%]*)"
)


class AggregateView:
    """Immutable snapshot of matched triggers, in the order they were given."""

    __slots__ = ("_triggers",)

    def __init__(self, triggers: Iterable[Trigger] = ()) -> None:
        self._triggers: tuple[Trigger, ...] = tuple(triggers)

    @property
    def triggers(self) -> tuple[Trigger, ...]:
        return self._triggers

    def array(self, attr: str) -> list[str]:
        return [to_text(trigger.get_property(attr)) for trigger in self._triggers]

    def concat(
        self,
        attr: str,
        prefix: str = "",
        inner_prefix: str = "",
        inner_suffix: str = "",
        suffix: str = "",
    ) -> str:
        inner = "".join(
            f"{inner_prefix}{to_text(trigger.get_property(attr))}{inner_suffix}"
            for trigger in self._triggers
        )
        return f"{prefix}{inner}{suffix}"

    def count(self) -> int:
        return len(self._triggers)

    def get_property(self, name: str) -> object | None:
        """Resolve a reference directive; unknown names resolve to ``None``."""

        if name.startswith(ARRAY_DIRECTIVE):
            return self.array(name.removeprefix(ARRAY_DIRECTIVE))
        if name.startswith(CONCAT_DIRECTIVE):
            directive = name.removeprefix(CONCAT_DIRECTIVE)
            match = _CONCAT_PATTERN.fullmatch(directive)
            if match is None:
                return directive
            attr, prefix, inner_prefix, inner_suffix, suffix = match.groups()
            return self.concat(attr, prefix, inner_prefix, inner_suffix, suffix)
        if name == COUNT_DIRECTIVE:
            return self.count()
        return None

    def __len__(self) -> int:
        return len(self._triggers)

    def __repr__(self) -> str:
        ids = ", ".join(trigger.trigger_id for trigger in self._triggers)
        return f"AggregateView([{ids}])"
