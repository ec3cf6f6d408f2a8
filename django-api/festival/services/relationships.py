"""Relationship maintenance between events and registrations.

Every registration id in ``Event.registration_refs`` must belong to a
registration whose ``event_refs`` lists that event, and the other way
round. The store has no multi-record transaction, so each operation
here is an explicit fan-out of single-record writes. Concurrent writers
to the same event race on its reference list (last write wins).
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from festival.domain import (
    Event,
    EventId,
    PaymentMode,
    RecordKind,
    Registration,
    RegistrationId,
)
from festival.domain.errors import (
    DomainError,
    EventReferenceError,
    RecordMissingError,
    RelationshipInconsistencyError,
    ValidationError,
)
from festival.stores.interfaces import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationDraft:
    """Validated fields for a registration that has not been stored yet."""

    participant_name: str
    college_name: str
    email: str
    phone: str
    event_refs: tuple[EventId, ...]
    amount_paid: int
    payment_mode: PaymentMode


class LinkProblem(Enum):
    # registration lists the event, event does not list the registration
    MISSING_BACK_REFERENCE = "missing_back_reference"
    # event lists the registration, registration does not list the event
    MISSING_FORWARD_REFERENCE = "missing_forward_reference"
    # event lists a registration that no longer exists
    ORPHANED_REFERENCE = "orphaned_reference"
    # registration lists a deleted event; left behind by delete_event
    DANGLING_EVENT = "dangling_event"


@dataclass(frozen=True)
class Inconsistency:
    event_id: EventId
    registration_id: RegistrationId
    problem: LinkProblem


def _unique(ids: Iterable[EventId]) -> tuple[EventId, ...]:
    return tuple(dict.fromkeys(ids))


class RelationshipMaintainer:
    """Creates and deletes registrations while keeping both reference lists in step."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def create_registration(self, draft: RegistrationDraft) -> Registration:
        """Store a registration and append it to every referenced event.

        Raises:
            ValidationError: If no events are referenced.
            EventReferenceError: If a referenced event does not exist. Nothing
                is left behind.
            DependencyError: If the store failed part way and the partial
                write was rolled back.
            RelationshipInconsistencyError: If the rollback failed too.
        """
        event_refs = _unique(draft.event_refs)
        if not event_refs:
            raise ValidationError({"event_refs": "Select at least one event"})

        missing = [ref for ref in event_refs if self._store.get(ref) is None]
        if missing:
            raise EventReferenceError(missing)

        registration_id = self._store.insert(
            RecordKind.REGISTRATION,
            {
                "participant_name": draft.participant_name,
                "college_name": draft.college_name,
                "email": draft.email,
                "phone": draft.phone,
                "event_refs": event_refs,
                "amount_paid": draft.amount_paid,
                "payment_mode": draft.payment_mode,
            },
        )

        linked: list[EventId] = []
        try:
            for event_id in event_refs:
                self._link(event_id, registration_id)
                linked.append(event_id)
        except DomainError:
            self._roll_back(registration_id, linked)
            raise

        registration = self._store.get(registration_id)
        logger.info(
            "Registration %s created for %d event(s)", registration_id, len(event_refs)
        )
        return registration

    def delete_registration(self, registration_id: RegistrationId) -> bool:
        """Delete a registration and clean it out of its events.

        Returns False if the registration does not exist. Events that no
        longer exist are skipped.
        """
        registration = self._store.get(registration_id)
        if registration is None:
            return False

        for event_id in registration.event_refs:
            try:
                self._unlink(event_id, registration_id)
            except RecordMissingError:
                logger.warning(
                    "Event %s vanished while unlinking registration %s",
                    event_id,
                    registration_id,
                )

        self._store.delete(registration_id)
        logger.info("Registration %s deleted", registration_id)
        return True

    def delete_event(self, event_id: EventId) -> bool:
        """Delete an event record only.

        Registrations that reference it keep the now-dangling id; see
        find_inconsistencies(). Returns False if the event does not exist.
        """
        if self._store.get(event_id) is None:
            return False
        self._store.delete(event_id)
        logger.info("Event %s deleted", event_id)
        return True

    def find_inconsistencies(self) -> list[Inconsistency]:
        """Audit every event and registration for one-sided links."""
        events: dict[EventId, Event] = {
            e.id: e for e in self._store.query(RecordKind.EVENT)
        }
        registrations: dict[RegistrationId, Registration] = {
            r.id: r for r in self._store.query(RecordKind.REGISTRATION)
        }

        found = []
        for registration in registrations.values():
            for event_id in registration.event_refs:
                event = events.get(event_id)
                if event is None:
                    problem = LinkProblem.DANGLING_EVENT
                elif registration.id not in event.registration_refs:
                    problem = LinkProblem.MISSING_BACK_REFERENCE
                else:
                    continue
                found.append(Inconsistency(event_id, registration.id, problem))

        for event in events.values():
            for registration_id in event.registration_refs:
                registration = registrations.get(registration_id)
                if registration is None:
                    problem = LinkProblem.ORPHANED_REFERENCE
                elif event.id not in registration.event_refs:
                    problem = LinkProblem.MISSING_FORWARD_REFERENCE
                else:
                    continue
                found.append(Inconsistency(event.id, registration_id, problem))
        return found

    def _link(self, event_id: EventId, registration_id: RegistrationId) -> None:
        event = self._store.get(event_id)
        if event is None:
            raise EventReferenceError([event_id])
        if registration_id in event.registration_refs:
            return
        try:
            self._store.patch(
                event_id,
                {"registration_refs": event.registration_refs + (registration_id,)},
            )
        except RecordMissingError as exc:
            raise EventReferenceError([event_id]) from exc

    def _unlink(self, event_id: EventId, registration_id: RegistrationId) -> None:
        event = self._store.get(event_id)
        if event is None:
            raise RecordMissingError(event_id)
        remaining = tuple(ref for ref in event.registration_refs if ref != registration_id)
        if remaining != event.registration_refs:
            self._store.patch(event_id, {"registration_refs": remaining})

    def _roll_back(self, registration_id: RegistrationId, linked: list[EventId]) -> None:
        """Undo a partially applied create, or report what could not be undone."""
        unrepaired: list[object] = []
        for event_id in linked:
            try:
                self._unlink(event_id, registration_id)
            except RecordMissingError:
                continue
            except DomainError:
                logger.exception("Could not unlink %s from event %s", registration_id, event_id)
                unrepaired.append(event_id)
        try:
            self._store.delete(registration_id)
        except DomainError:
            logger.exception("Could not delete partial registration %s", registration_id)
            unrepaired.append(registration_id)

        if unrepaired:
            raise RelationshipInconsistencyError(registration_id, unrepaired)
        logger.warning("Rolled back partial registration %s", registration_id)
