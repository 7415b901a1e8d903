"""Ports for persisting managed configuration records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from autoconf.domain.model import ManagedRecord, PropertyValue


@runtime_checkable
class ManagedRecordStore(Protocol):
    """Create, update and delete persisted configuration records.

    Every operation raises ``StoreUnavailableError`` on failure. For
    ``is_template=False`` the store hands out the single record named by
    ``target_identity`` (and ``scope``) instead of creating a new instance.
    """

    def create(
        self,
        target_identity: str,
        *,
        scope: str | None = None,
        is_template: bool = True,
    ) -> ManagedRecord: ...

    def update(self, record: ManagedRecord, properties: Mapping[str, PropertyValue]) -> None: ...

    def delete(self, record: ManagedRecord) -> None: ...


@runtime_checkable
class RecordCatalog(ManagedRecordStore, Protocol):
    """Record store that can also list what it holds."""

    def list_records(
        self, *, target_identity: str | None = None
    ) -> tuple[ManagedRecord, ...]: ...


__all__ = ["ManagedRecordStore", "RecordCatalog"]
