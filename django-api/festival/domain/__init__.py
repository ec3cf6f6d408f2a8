from festival.domain.models import Event, Record, Registration, ServiceLine, ServiceRecord, Setting
from festival.domain.value_objects import (
    ID_TYPES,
    EventId,
    EventType,
    PaymentMode,
    RecordId,
    RecordKind,
    RegistrationId,
    ServiceKind,
    ServiceRecordId,
    SettingId,
)

__all__ = [
    "Event",
    "Registration",
    "ServiceLine",
    "ServiceRecord",
    "Setting",
    "Record",
    "EventId",
    "RegistrationId",
    "ServiceRecordId",
    "SettingId",
    "RecordId",
    "RecordKind",
    "EventType",
    "PaymentMode",
    "ServiceKind",
    "ID_TYPES",
]
