"""Dictionary-backed managed record store."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from autoconf.domain.errors import StoreUnavailableError
from autoconf.domain.model import ManagedRecord, singleton_record_id, template_record_id
from autoconf.domain.reconciliation import RecordOperation

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from autoconf.domain.model import Properties, PropertyValue


class InMemoryRecordStore:
    """Keep managed records in a dict; useful for tests and dry runs.

    ``fail_on`` makes the given operations raise ``StoreUnavailableError`` to
    simulate an unavailable backend. Every successful call is appended to
    ``calls`` as ``(operation, record_id)``.
    """

    def __init__(self, *, fail_on: Iterable[RecordOperation] = ()) -> None:
        self.fail_on: set[RecordOperation] = set(fail_on)
        self.calls: list[tuple[RecordOperation, str]] = []
        self._records: dict[str, ManagedRecord] = {}

    def create(
        self,
        target_identity: str,
        *,
        scope: str | None = None,
        is_template: bool = True,
    ) -> ManagedRecord:
        self._check(RecordOperation.CREATE)
        if is_template:
            record_id = template_record_id(target_identity)
        else:
            record_id = singleton_record_id(target_identity, scope)
            existing = self._records.get(record_id)
            if existing is not None:
                self.calls.append((RecordOperation.CREATE, record_id))
                return self._handle(existing)

        stored = ManagedRecord(
            record_id=record_id,
            target_identity=target_identity,
            scope=scope,
            is_template=is_template,
        )
        self._records[record_id] = stored
        self.calls.append((RecordOperation.CREATE, record_id))
        return self._handle(stored)

    def update(self, record: ManagedRecord, properties: Mapping[str, PropertyValue]) -> None:
        self._check(RecordOperation.UPDATE)
        stored = self._require(record.record_id)
        stored.properties = copy.deepcopy(dict(properties))
        self.calls.append((RecordOperation.UPDATE, record.record_id))

    def delete(self, record: ManagedRecord) -> None:
        self._check(RecordOperation.DELETE)
        self._require(record.record_id)
        del self._records[record.record_id]
        self.calls.append((RecordOperation.DELETE, record.record_id))

    def get(self, record_id: str) -> ManagedRecord | None:
        stored = self._records.get(record_id)
        return None if stored is None else self._handle(stored)

    def list_records(self, *, target_identity: str | None = None) -> tuple[ManagedRecord, ...]:
        return tuple(
            self._handle(stored)
            for stored in self._records.values()
            if target_identity is None or stored.target_identity == target_identity
        )

    def properties_of(self, record_id: str) -> Properties:
        return copy.deepcopy(self._require(record_id).properties)

    def __len__(self) -> int:
        return len(self._records)

    def _check(self, operation: RecordOperation) -> None:
        if operation in self.fail_on:
            raise StoreUnavailableError(f"Record store rejected {operation}")

    def _require(self, record_id: str) -> ManagedRecord:
        stored = self._records.get(record_id)
        if stored is None:
            raise StoreUnavailableError(f"Record {record_id} does not exist")
        return stored

    @staticmethod
    def _handle(stored: ManagedRecord) -> ManagedRecord:
        return ManagedRecord(
            record_id=stored.record_id,
            target_identity=stored.target_identity,
            scope=stored.scope,
            is_template=stored.is_template,
            properties=copy.deepcopy(stored.properties),
        )
