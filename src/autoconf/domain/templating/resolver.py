"""Resolve ``key=value`` property templates against a property source.

A value is used as-is unless it references properties with ``{name}``:

- ``key={name}`` stores the referenced value itself, keeping its type
- ``key=pre{a}mid{b}post`` substitutes the string form of every reference

Missing properties resolve to ``MISSING_PLACEHOLDER``. Only a line without
``=`` is an error.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from autoconf.domain.errors import MalformedTemplateError
from autoconf.domain.templating.source import MISSING_PLACEHOLDER, to_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from autoconf.domain.model import Properties, PropertyValue
    from autoconf.domain.templating.source import PropertySource

_REFERENCE: Final[re.Pattern[str]] = re.compile(r"\{([^{}]*)\}")


def parse_template_line(line: str) -> tuple[str, str]:
    key, separator, value = line.partition("=")
    if not separator:
        raise MalformedTemplateError(line)
    return key, value


def render_value(value: str, context: PropertySource | None) -> PropertyValue:
    open_idx = value.find("{")
    close_idx = value.find("}")
    if open_idx == -1 or close_idx == -1 or context is None:
        return value

    if open_idx == 0 and close_idx == len(value) - 1:
        resolved = context.get_property(value[1:-1])
        return _as_property_value(resolved)

    return _REFERENCE.sub(lambda match: to_text(context.get_property(match.group(1))), value)


def resolve_templates(lines: Iterable[str], context: PropertySource | None) -> Properties:
    """Materialize the property map described by ``lines``.

    Raises ``MalformedTemplateError`` for the first line lacking ``=``.
    """

    properties: Properties = {}
    for line in lines:
        key, value = parse_template_line(line)
        properties[key] = render_value(value, context)
    return properties


def _as_property_value(value: object | None) -> PropertyValue:
    if value is None:
        return MISSING_PLACEHOLDER
    if isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, list | tuple):
        return [to_text(item) for item in value]
    return to_text(value)
