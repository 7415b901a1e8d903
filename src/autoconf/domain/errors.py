"""Domain error definitions."""

from __future__ import annotations


class AutoconfError(RuntimeError):
    """Base class for errors raised by the reconciliation core and its ports."""


class MalformedTemplateError(AutoconfError):
    """Raised when a property template line is not in the format ``key=value``."""

    def __init__(self, line: str) -> None:
        super().__init__(f"property {line!r} is not in the format key=value")
        self.line = line


class StoreUnavailableError(AutoconfError):
    """Raised by record stores when a create/update/delete cannot be performed."""


class SubscriptionError(AutoconfError):
    """Raised when the event dispatcher cannot (re)subscribe under a filter."""


class InvalidFilterError(SubscriptionError):
    """Raised when a trigger filter expression cannot be parsed."""

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(f"Invalid filter {expression!r}: {reason}")
        self.expression = expression
        self.reason = reason
