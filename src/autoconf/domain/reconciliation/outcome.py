"""Result types reported by reconciliation operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class RecordOperation(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class ReconcileFailure:
    """One record operation that failed and was skipped."""

    trigger_id: str | None
    operation: RecordOperation
    error: Exception


@dataclass(slots=True)
class ReconcileOutcome:
    """Store calls performed while processing one policy change or event."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    failures: list[ReconcileFailure] = field(default_factory=list[ReconcileFailure])

    @property
    def changed(self) -> bool:
        return bool(self.created or self.updated or self.deleted)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def fail(self, trigger_id: str | None, operation: RecordOperation, error: Exception) -> None:
        self.failures.append(ReconcileFailure(trigger_id, operation, error))

    def merge(self, other: ReconcileOutcome) -> ReconcileOutcome:
        """Return a new outcome summing ``self`` and ``other``."""

        return ReconcileOutcome(
            created=self.created + other.created,
            updated=self.updated + other.updated,
            deleted=self.deleted + other.deleted,
            failures=[*self.failures, *other.failures],
        )

    __add__ = merge
