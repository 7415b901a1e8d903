"""SQLAlchemy adapter persisting managed records."""

from __future__ import annotations

from .mappings import managed_record_table, metadata
from .store import SqlAlchemyRecordStore
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyRecordStore",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "configured_engine",
    "is_started",
    "managed_record_table",
    "metadata",
    "shutdown",
    "startup",
]
