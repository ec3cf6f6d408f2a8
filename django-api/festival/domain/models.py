"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in festival/models.py (persistence layer).

Event and Registration reference each other by id only. The two
reference lists describe one relationship stored twice; keeping them in
step is the job of services/relationships.py.
"""

from dataclasses import dataclass
from datetime import datetime

from festival.domain.value_objects import (
    EventId,
    EventType,
    PaymentMode,
    RegistrationId,
    ServiceKind,
    ServiceRecordId,
    SettingId,
)


@dataclass(frozen=True)
class Event:
    """Domain representation of a festival Event."""

    id: EventId
    name: str
    committee: str
    fee: int
    room: str
    link: str
    type: EventType
    registration_refs: tuple[RegistrationId, ...]
    created_at: datetime

    def __post_init__(self) -> None:
        if self.fee < 0:
            raise ValueError("Event fee cannot be negative")

    @property
    def is_flash(self) -> bool:
        return self.type is EventType.FLASH


@dataclass(frozen=True)
class Registration:
    """Domain representation of a participant's Registration."""

    id: RegistrationId
    participant_name: str
    college_name: str
    email: str
    phone: str
    event_refs: tuple[EventId, ...]
    amount_paid: int
    payment_mode: PaymentMode
    created_at: datetime


@dataclass(frozen=True)
class ServiceLine:
    """One priced line of a stall sale."""

    service_kind: ServiceKind
    unit_count: int
    unit_price: int

    def __post_init__(self) -> None:
        if self.unit_count <= 0:
            raise ValueError("Service unit count must be positive")
        if self.unit_price < 0:
            raise ValueError("Service unit price cannot be negative")

    @property
    def amount(self) -> int:
        return self.unit_count * self.unit_price


@dataclass(frozen=True)
class ServiceRecord:
    """Domain representation of a ServiceRecord (non-event stall sale)."""

    id: ServiceRecordId
    client_name: str
    services: tuple[ServiceLine, ...]
    payment_mode: PaymentMode
    total: int
    created_at: datetime

    def __post_init__(self) -> None:
        if self.total != sum(line.amount for line in self.services):
            raise ValueError("Service record total must equal the sum of its lines")


@dataclass(frozen=True)
class Setting:
    """Domain representation of a named Setting."""

    id: SettingId
    name: str
    value: str
    created_at: datetime


Record = Event | Registration | ServiceRecord | Setting
