"""Pydantic models describing trigger snapshot files.

A snapshot is a JSON list of triggers::

    [{"id": "svc.1", "attributes": {"service.factoryPid": "com.example.Producer"}}]
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from autoconf.domain.model import Trigger

if TYPE_CHECKING:
    from os import PathLike

type SnapshotAttribute = str | bool | int | float | list[str]


class TriggerPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    trigger_id: str = Field(min_length=1, alias="id")
    attributes: dict[str, SnapshotAttribute] = Field(default_factory=dict)

    def to_trigger(self) -> Trigger:
        return Trigger(trigger_id=self.trigger_id, attributes=self.attributes)


_SNAPSHOT = TypeAdapter(list[TriggerPayload])


class InvalidSnapshotError(ValueError):
    """Raised when a trigger snapshot cannot be read or validated."""


def parse_trigger_snapshot(payload: object) -> tuple[Trigger, ...]:
    try:
        entries = _SNAPSHOT.validate_python(payload)
    except ValidationError as exc:
        raise InvalidSnapshotError(f"Invalid trigger snapshot: {exc}") from exc
    seen: set[str] = set()
    for entry in entries:
        if entry.trigger_id in seen:
            raise InvalidSnapshotError(f"Duplicate trigger id in snapshot: {entry.trigger_id}")
        seen.add(entry.trigger_id)
    return tuple(entry.to_trigger() for entry in entries)


def load_trigger_snapshot(path: str | PathLike[str]) -> tuple[Trigger, ...]:
    """Read a JSON trigger snapshot from ``path``."""

    snapshot_path = Path(path)
    try:
        with snapshot_path.open(encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidSnapshotError(f"Unable to read triggers {snapshot_path}: {exc}") from exc
    return parse_trigger_snapshot(payload)
