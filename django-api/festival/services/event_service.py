"""Event service - event catalog and registration bookkeeping.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from dataclasses import dataclass
from typing import TypeVar

from django.utils.text import slugify

from festival.domain import Event, EventId, EventType, RecordKind, Registration, RegistrationId
from festival.domain.errors import (
    DuplicateRecordError,
    EventNotFoundError,
    InvalidIdError,
    ValidationError,
)
from festival.services.relationships import RelationshipMaintainer
from festival.stores.interfaces import DocumentStore, Order

logger = logging.getLogger(__name__)

IdT = TypeVar("IdT", EventId, RegistrationId)


def parse_id(id_type: type[IdT], value: str) -> IdT:
    """Parse a record id from its string form.

    Raises:
        InvalidIdError: If the value is not a valid UUID.
    """
    try:
        return id_type.from_string(value)
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidIdError() from exc


@dataclass(frozen=True)
class EventTally:
    event_id: EventId
    name: str
    registrations: int


@dataclass(frozen=True)
class Dashboard:
    total_collected: int
    registration_count: int
    events: tuple[EventTally, ...]


class EventService:
    """Service for event catalog and registration operations."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._relationships = RelationshipMaintainer(store)

    def list_events(self) -> list[Event]:
        """Return all events ordered by name."""
        return self._store.query(RecordKind.EVENT, index="by_name")

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self._store.get(parse_id(EventId, event_id))
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def get_event_by_link(self, link: str) -> Event:
        """Return an event by its link slug.

        Raises:
            EventNotFoundError: If no event has this link.
        """
        events = self._store.query(RecordKind.EVENT, index="by_link", value=link)
        if not events:
            raise EventNotFoundError(link)
        return events[0]

    def registrations_for_event(self, link: str) -> tuple[Event, list[Registration]]:
        """Return an event and its registrations, newest first.

        References to registrations that no longer exist are skipped.
        """
        event = self.get_event_by_link(link)
        registrations = [
            registration
            for registration in (self._store.get(ref) for ref in event.registration_refs)
            if registration is not None
        ]
        registrations.sort(key=lambda r: r.created_at, reverse=True)
        return event, registrations

    def list_registrations(self) -> list[Registration]:
        """Return all registrations, newest first."""
        return self._store.query(RecordKind.REGISTRATION, order=Order.DESC)

    def create_event(
        self, name: str, committee: str, fee: int, room: str, type: EventType
    ) -> Event:
        """Create an event with an empty registration list.

        Raises:
            ValidationError: If the name is blank or the fee is negative.
            DuplicateRecordError: If the name or derived link is taken.
        """
        name = name.strip()
        link = slugify(name)
        errors = {}
        if not link:
            errors["name"] = "Name is required"
        if fee < 0:
            errors["fee"] = "Fee cannot be negative"
        if errors:
            raise ValidationError(errors)
        self._ensure_unique("name", name)
        self._ensure_unique("link", link)

        event_id = self._store.insert(
            RecordKind.EVENT,
            {
                "name": name,
                "committee": committee,
                "fee": fee,
                "room": room,
                "link": link,
                "type": type,
                "registration_refs": (),
            },
        )
        logger.info("Event %s created as %s", name, event_id)
        return self._store.get(event_id)

    def update_event(
        self, event_id: str, name: str, committee: str, fee: int, room: str, type: EventType
    ) -> Event:
        """Update an event's descriptive fields.

        The link and the registration list are never touched here.
        """
        event = self.get_event(event_id)
        name = name.strip()
        errors = {}
        if not name:
            errors["name"] = "Name is required"
        if fee < 0:
            errors["fee"] = "Fee cannot be negative"
        if errors:
            raise ValidationError(errors)
        self._ensure_unique("name", name, exclude=event.id)

        self._store.patch(
            event.id,
            {"name": name, "committee": committee, "fee": fee, "room": room, "type": type},
        )
        logger.info("Event %s updated", event.id)
        return self._store.get(event.id)

    def delete_event(self, event_id: str) -> None:
        """Delete an event. Registrations keep their reference to it.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        if not self._relationships.delete_event(parse_id(EventId, event_id)):
            raise EventNotFoundError(event_id)

    def delete_registration(self, registration_id: str) -> bool:
        """Delete a registration and its back-references. False if it did not exist."""
        return self._relationships.delete_registration(
            parse_id(RegistrationId, registration_id)
        )

    def dashboard(self) -> Dashboard:
        registrations = self._store.query(RecordKind.REGISTRATION)
        return Dashboard(
            total_collected=sum(r.amount_paid for r in registrations),
            registration_count=len(registrations),
            events=tuple(
                EventTally(event_id=e.id, name=e.name, registrations=len(e.registration_refs))
                for e in self.list_events()
            ),
        )

    def _ensure_unique(self, field: str, value: str, exclude: EventId | None = None) -> None:
        index = "by_name" if field == "name" else "by_link"
        clashes = [
            e for e in self._store.query(RecordKind.EVENT, index=index, value=value)
            if e.id != exclude
        ]
        if clashes:
            raise DuplicateRecordError(field)
