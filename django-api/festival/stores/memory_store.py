"""In-process implementation of the DocumentStore.

Keeps domain records in a dict. The clock and id source are injectable
so ordering and identities are deterministic under test.
"""

import dataclasses
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from django.utils import timezone

from festival.domain import (
    ID_TYPES,
    Event,
    Record,
    RecordId,
    RecordKind,
    Registration,
    ServiceRecord,
    Setting,
)
from festival.domain.errors import DuplicateRecordError, RecordMissingError
from festival.stores.interfaces import DocumentStore, Order, index_field

RECORD_TYPES: dict[RecordKind, type] = {
    RecordKind.EVENT: Event,
    RecordKind.REGISTRATION: Registration,
    RecordKind.SERVICE_RECORD: ServiceRecord,
    RecordKind.SETTING: Setting,
}

UNIQUE_FIELDS: dict[RecordKind, tuple[str, ...]] = {
    RecordKind.EVENT: ("name", "link"),
    RecordKind.SETTING: ("name",),
}


def _freeze(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {
        name: tuple(value) if isinstance(value, list) else value
        for name, value in fields.items()
    }


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed document store for tests and local tooling."""

    def __init__(
        self,
        clock: Callable[[], datetime] = timezone.now,
        id_factory: Callable[[], UUID] = uuid4,
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory
        self._records: dict[RecordId, Record] = {}

    def insert(self, kind: RecordKind, fields: Mapping[str, Any]) -> RecordId:
        values = _freeze(fields)
        self._check_unique(kind, values, exclude=None)
        record_id = ID_TYPES[kind](value=self._id_factory())
        self._records[record_id] = RECORD_TYPES[kind](
            id=record_id, created_at=self._clock(), **values
        )
        return record_id

    def get(self, record_id: RecordId) -> Record | None:
        return self._records.get(record_id)

    def patch(self, record_id: RecordId, fields: Mapping[str, Any]) -> None:
        record = self._records.get(record_id)
        if record is None:
            raise RecordMissingError(record_id)
        values = _freeze(fields)
        self._check_unique(record_id.kind, values, exclude=record_id)
        self._records[record_id] = dataclasses.replace(record, **values)

    def delete(self, record_id: RecordId) -> None:
        self._records.pop(record_id, None)

    def query(
        self,
        kind: RecordKind,
        index: str | None = None,
        value: Any = None,
        order: Order = Order.ASC,
    ) -> list[Record]:
        records = [r for r in self._records.values() if r.id.kind is kind]
        field = index_field(kind, index) if index else "created_at"
        if index and value is not None:
            records = [r for r in records if getattr(r, field) == value]
        return sorted(
            records,
            key=lambda r: getattr(r, field),
            reverse=order is Order.DESC,
        )

    def _check_unique(
        self, kind: RecordKind, values: Mapping[str, Any], exclude: RecordId | None
    ) -> None:
        for field in UNIQUE_FIELDS.get(kind, ()):
            if field not in values:
                continue
            for record in self._records.values():
                if (
                    record.id.kind is kind
                    and record.id != exclude
                    and getattr(record, field) == values[field]
                ):
                    raise DuplicateRecordError(field)
