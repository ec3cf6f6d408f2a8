"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Self
from uuid import UUID


class RecordKind(Enum):
    """The four record collections held by the document store."""

    SETTING = "setting"
    EVENT = "event"
    REGISTRATION = "registration"
    SERVICE_RECORD = "serviceRecord"


class EventType(Enum):
    STANDARD = "STANDARD"
    FLASH = "FLASH"


class PaymentMode(Enum):
    CASH = "CASH"
    UPI = "UPI"


class ServiceKind(Enum):
    TATTOO = "tattoo"
    NAIL = "nail"
    CARICATURE = "caricature"


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    kind: ClassVar[RecordKind] = RecordKind.EVENT

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class RegistrationId:
    """Unique identifier for a Registration."""

    kind: ClassVar[RecordKind] = RecordKind.REGISTRATION

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ServiceRecordId:
    """Unique identifier for a ServiceRecord."""

    kind: ClassVar[RecordKind] = RecordKind.SERVICE_RECORD

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class SettingId:
    """Unique identifier for a Setting."""

    kind: ClassVar[RecordKind] = RecordKind.SETTING

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


RecordId = EventId | RegistrationId | ServiceRecordId | SettingId

ID_TYPES: dict[RecordKind, type[RecordId]] = {
    RecordKind.EVENT: EventId,
    RecordKind.REGISTRATION: RegistrationId,
    RecordKind.SERVICE_RECORD: ServiceRecordId,
    RecordKind.SETTING: SettingId,
}
