"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. The store owns record
lifetime; it offers single-record writes only, so anything spanning
several records is an explicit fan-out done by the services.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from typing import Any

from festival.domain import Record, RecordId, RecordKind


class Order(Enum):
    ASC = "asc"
    DESC = "desc"


# (kind, index name) -> indexed field
INDEXES: dict[tuple[RecordKind, str], str] = {
    (RecordKind.EVENT, "by_name"): "name",
    (RecordKind.EVENT, "by_link"): "link",
    (RecordKind.SETTING, "by_name"): "name",
}


class DocumentStore(ABC):
    """Interface for record persistence over the four record kinds.

    ``fields`` use domain field names and domain types (ids, enums,
    tuples); implementations convert to their own representation.
    """

    @abstractmethod
    def insert(self, kind: RecordKind, fields: Mapping[str, Any]) -> RecordId:
        """Insert a record and return its new id. ``created_at`` is assigned here."""
        ...

    @abstractmethod
    def get(self, record_id: RecordId) -> Record | None:
        """Return a record by ID, or None if not found."""
        ...

    @abstractmethod
    def patch(self, record_id: RecordId, fields: Mapping[str, Any]) -> None:
        """Overwrite the given fields of an existing record.

        Raises:
            RecordMissingError: If the record does not exist.
        """
        ...

    @abstractmethod
    def delete(self, record_id: RecordId) -> None:
        """Delete a record. Deleting a missing record is a no-op."""
        ...

    @abstractmethod
    def query(
        self,
        kind: RecordKind,
        index: str | None = None,
        value: Any = None,
        order: Order = Order.ASC,
    ) -> list[Record]:
        """Return records of a kind.

        With an index, records are ordered by the indexed field and, when
        ``value`` is given, filtered to those equal to it. Without one,
        they are ordered by ``created_at``.
        """
        ...


def index_field(kind: RecordKind, index: str) -> str:
    try:
        return INDEXES[(kind, index)]
    except KeyError:
        raise ValueError(f"No index {index!r} on {kind.value}") from None
