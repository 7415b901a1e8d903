from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from autoconf.adapters.memory import InMemoryRecordStore
from autoconf.adapters.registry import InMemoryTriggerRegistry
from autoconf.adapters.sqlalchemy.migrations import upgrade_head
from autoconf.adapters.sqlalchemy.store import SqlAlchemyRecordStore
from autoconf.adapters.sqlalchemy.unit_of_work import shutdown, startup
from autoconf.domain.reconciliation import Reconciler

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def registry() -> InMemoryTriggerRegistry:
    return InMemoryTriggerRegistry()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def reconciler(registry: InMemoryTriggerRegistry, store: InMemoryRecordStore) -> Reconciler:
    return Reconciler(dispatcher=registry, store=store)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_engine: Engine) -> Iterator[SqlAlchemyRecordStore]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyRecordStore()
    finally:
        shutdown()
