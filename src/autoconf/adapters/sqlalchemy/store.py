"""Managed record store persisting records through SQLAlchemy."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from autoconf.adapters.sqlalchemy.mappings import managed_record_table
from autoconf.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
from autoconf.domain.errors import StoreUnavailableError
from autoconf.domain.model import ManagedRecord, singleton_record_id, template_record_id

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from sqlalchemy import Row

    from autoconf.domain.model import Properties, PropertyValue

log = logging.getLogger(__name__)

type UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SqlAlchemyRecordStore:
    """Store each managed record as one ``managed_record`` row.

    Every call runs in its own unit of work. Database errors are reported as
    ``StoreUnavailableError`` so the reconciler can skip the record.
    """

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory | None = None,
        *,
        now_provider: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory or SqlAlchemyUnitOfWork
        self._now = now_provider

    def create(
        self,
        target_identity: str,
        *,
        scope: str | None = None,
        is_template: bool = True,
    ) -> ManagedRecord:
        record_id = (
            template_record_id(target_identity)
            if is_template
            else singleton_record_id(target_identity, scope)
        )
        try:
            with self._unit_of_work_factory() as uow:
                if not is_template:
                    row = uow.session.execute(
                        select(managed_record_table).where(
                            managed_record_table.c.record_id == record_id
                        )
                    ).one_or_none()
                    if row is not None:
                        return _to_record(row)
                uow.session.execute(
                    insert(managed_record_table).values(
                        record_id=record_id,
                        target_identity=target_identity,
                        scope=scope,
                        is_template=is_template,
                        properties={},
                        created_at=self._now(),
                    )
                )
                uow.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Unable to create record for {target_identity}") from exc
        log.debug("Inserted managed record %s", record_id)
        return ManagedRecord(
            record_id=record_id,
            target_identity=target_identity,
            scope=scope,
            is_template=is_template,
        )

    def update(self, record: ManagedRecord, properties: Mapping[str, PropertyValue]) -> None:
        payload = dict(properties)
        try:
            with self._unit_of_work_factory() as uow:
                result = uow.session.execute(
                    update(managed_record_table)
                    .where(managed_record_table.c.record_id == record.record_id)
                    .values(properties=payload, updated_at=self._now())
                )
                if result.rowcount == 0:
                    raise StoreUnavailableError(f"Record {record.record_id} does not exist")
                uow.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Unable to update record {record.record_id}") from exc

    def delete(self, record: ManagedRecord) -> None:
        try:
            with self._unit_of_work_factory() as uow:
                result = uow.session.execute(
                    delete(managed_record_table).where(
                        managed_record_table.c.record_id == record.record_id
                    )
                )
                if result.rowcount == 0:
                    raise StoreUnavailableError(f"Record {record.record_id} does not exist")
                uow.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Unable to delete record {record.record_id}") from exc

    def get(self, record_id: str) -> ManagedRecord | None:
        try:
            with self._unit_of_work_factory() as uow:
                row = uow.session.execute(
                    select(managed_record_table).where(
                        managed_record_table.c.record_id == record_id
                    )
                ).one_or_none()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Unable to read record {record_id}") from exc
        return None if row is None else _to_record(row)

    def list_records(self, *, target_identity: str | None = None) -> tuple[ManagedRecord, ...]:
        stmt = select(managed_record_table).order_by(managed_record_table.c.created_at)
        if target_identity is not None:
            stmt = stmt.where(managed_record_table.c.target_identity == target_identity)
        try:
            with self._unit_of_work_factory() as uow:
                rows = uow.session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Unable to list records") from exc
        return tuple(_to_record(row) for row in rows)


def _to_record(row: Row[Any]) -> ManagedRecord:
    mapping = row._mapping  # noqa: SLF001
    properties = cast("Properties", dict(mapping["properties"] or {}))
    return ManagedRecord(
        record_id=mapping["record_id"],
        target_identity=mapping["target_identity"],
        scope=mapping["scope"],
        is_template=bool(mapping["is_template"]),
        properties=properties,
    )


if TYPE_CHECKING:
    from autoconf.domain.ports import ManagedRecordStore

    _store_check: ManagedRecordStore = SqlAlchemyRecordStore()
