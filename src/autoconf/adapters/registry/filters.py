"""LDAP-style filter expressions for selecting triggers by their attributes.

Supported grammar (RFC 1960 subset, as used by service registries)::

    filter     = "(" filtercomp ")"
    filtercomp = "&" filter+ | "|" filter+ | "!" filter | item
    item       = attr ("=" | "~=" | ">=" | "<=") value

``attr=*`` tests presence and ``*`` inside a value is a substring wildcard.
A backslash escapes the next character in a value. Attribute names are
matched case-insensitively; list-valued attributes match when any item does.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Literal

from autoconf.domain.errors import InvalidFilterError

if TYPE_CHECKING:
    from autoconf.domain.model import AttributeValue

type ComparisonOperator = Literal["=", "~=", ">=", "<="]

_OPERATOR_CHARS: Final[frozenset[str]] = frozenset("=~<>")
_SPECIAL_CHARS: Final[frozenset[str]] = frozenset("()")


@dataclass(frozen=True, slots=True)
class AndFilter:
    operands: tuple[FilterNode, ...]


@dataclass(frozen=True, slots=True)
class OrFilter:
    operands: tuple[FilterNode, ...]


@dataclass(frozen=True, slots=True)
class NotFilter:
    operand: FilterNode


@dataclass(frozen=True, slots=True)
class PresenceFilter:
    attribute: str


@dataclass(frozen=True, slots=True)
class SubstringFilter:
    attribute: str
    initial: str
    middle: tuple[str, ...]
    final: str


@dataclass(frozen=True, slots=True)
class ComparisonFilter:
    attribute: str
    operator: ComparisonOperator
    value: str


type FilterNode = (
    AndFilter | OrFilter | NotFilter | PresenceFilter | SubstringFilter | ComparisonFilter
)


def parse_filter(expression: str) -> FilterNode:
    """Parse ``expression`` or raise ``InvalidFilterError``.

    A bare item without enclosing parentheses (``name=value``) is accepted.
    """

    text = expression.strip()
    if not text:
        raise InvalidFilterError(expression, "empty filter")
    if not text.startswith("("):
        text = f"({text})"
    parser = _Parser(expression, text)
    node = parser.parse_filter()
    parser.skip_whitespace()
    if not parser.at_end():
        raise InvalidFilterError(expression, f"unexpected trailing input at {parser.pos}")
    return node


def matches(node: FilterNode, attributes: Mapping[str, AttributeValue]) -> bool:
    """Evaluate ``node`` against a trigger's attributes."""

    folded = {key.lower(): value for key, value in attributes.items()}
    return _evaluate(node, folded)


class _Parser:
    def __init__(self, expression: str, text: str) -> None:
        self.expression = expression
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_whitespace(self) -> None:
        while not self.at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        if self.at_end():
            raise InvalidFilterError(self.expression, "unexpected end of filter")
        return self.text[self.pos]

    def expect(self, char: str) -> None:
        if self.peek() != char:
            raise InvalidFilterError(
                self.expression, f"expected {char!r} at {self.pos}, found {self.peek()!r}"
            )
        self.pos += 1

    def parse_filter(self) -> FilterNode:
        self.skip_whitespace()
        self.expect("(")
        self.skip_whitespace()
        head = self.peek()
        if head == "&":
            self.pos += 1
            node: FilterNode = AndFilter(self.parse_operands())
        elif head == "|":
            self.pos += 1
            node = OrFilter(self.parse_operands())
        elif head == "!":
            self.pos += 1
            node = NotFilter(self.parse_filter())
        else:
            node = self.parse_item()
        self.skip_whitespace()
        self.expect(")")
        return node

    def parse_operands(self) -> tuple[FilterNode, ...]:
        operands: list[FilterNode] = []
        self.skip_whitespace()
        while self.peek() == "(":
            operands.append(self.parse_filter())
            self.skip_whitespace()
        if not operands:
            raise InvalidFilterError(self.expression, f"missing operands at {self.pos}")
        return tuple(operands)

    def parse_item(self) -> FilterNode:
        start = self.pos
        while self.peek() not in _OPERATOR_CHARS:
            if self.peek() in _SPECIAL_CHARS:
                raise InvalidFilterError(self.expression, f"missing operator at {self.pos}")
            self.pos += 1
        attribute = self.text[start : self.pos].strip()
        if not attribute:
            raise InvalidFilterError(self.expression, f"missing attribute at {start}")

        operator = self.parse_operator()
        segments = self.parse_value()
        if operator != "=":
            return ComparisonFilter(attribute, operator, "*".join(segments))
        if segments == ["", ""]:
            return PresenceFilter(attribute)
        if len(segments) == 1:
            return ComparisonFilter(attribute, "=", segments[0])
        return SubstringFilter(attribute, segments[0], tuple(segments[1:-1]), segments[-1])

    def parse_operator(self) -> ComparisonOperator:
        char = self.peek()
        if char == "=":
            self.pos += 1
            return "="
        self.pos += 1
        if self.peek() != "=":
            raise InvalidFilterError(self.expression, f"invalid operator at {self.pos - 1}")
        self.pos += 1
        if char == "~":
            return "~="
        if char == ">":
            return ">="
        if char == "<":
            return "<="
        raise InvalidFilterError(self.expression, f"invalid operator at {self.pos - 2}")

    def parse_value(self) -> list[str]:
        """Return the value split at unescaped ``*`` characters."""

        segments: list[str] = []
        current: list[str] = []
        while self.peek() != ")":
            char = self.peek()
            if char == "(":
                raise InvalidFilterError(self.expression, f"unescaped '(' at {self.pos}")
            if char == "\\":
                self.pos += 1
                current.append(self.peek())
            elif char == "*":
                segments.append("".join(current))
                current = []
            else:
                current.append(char)
            self.pos += 1
        segments.append("".join(current))
        return segments


def _evaluate(node: FilterNode, attributes: Mapping[str, AttributeValue]) -> bool:
    if isinstance(node, AndFilter):
        return all(_evaluate(operand, attributes) for operand in node.operands)
    if isinstance(node, OrFilter):
        return any(_evaluate(operand, attributes) for operand in node.operands)
    if isinstance(node, NotFilter):
        return not _evaluate(node.operand, attributes)

    value = attributes.get(node.attribute.lower())
    if value is None:
        return False
    if isinstance(node, PresenceFilter):
        return True
    candidates = value if _is_multi_valued(value) else (value,)
    if isinstance(node, SubstringFilter):
        return any(_substring_match(node, str(item)) for item in candidates)
    return any(_compare(item, node.operator, node.value) for item in candidates)


def _is_multi_valued(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str)


def _substring_match(node: SubstringFilter, text: str) -> bool:
    if not text.startswith(node.initial):
        return False
    pos = len(node.initial)
    for part in node.middle:
        found = text.find(part, pos)
        if found == -1:
            return False
        pos = found + len(part)
    return len(text) - pos >= len(node.final) and text.endswith(node.final)


def _compare(actual: object, operator: ComparisonOperator, expected: str) -> bool:
    if isinstance(actual, bool):
        return operator in {"=", "~="} and str(actual).lower() == expected.strip().lower()
    if isinstance(actual, int | float):
        try:
            wanted: float = type(actual)(expected.strip())
        except ValueError:
            return False
        return _ordered(actual, operator, wanted)

    text = str(actual)
    if operator == "~=":
        return _approximate(text) == _approximate(expected)
    return _ordered(text, operator, expected)


def _ordered[T: (str, float)](actual: T, operator: ComparisonOperator, expected: T) -> bool:
    if operator == ">=":
        return actual >= expected
    if operator == "<=":
        return actual <= expected
    return actual == expected


def _approximate(text: str) -> str:
    return "".join(text.split()).lower()
