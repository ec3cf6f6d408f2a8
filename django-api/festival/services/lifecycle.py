"""Registration flow state machine.

One operator drives one registration attempt at a time:

    IDLE --proceed--> PAYMENT --complete--> EMAIL --send/skip--> COMPLETE
      ^                  |                                          |
      +-----cancel-------+                                          |
      +------------------------------next---------------------------+

Participant fields, the event selection and the payment mode can only be
edited in IDLE. The registration is committed on ``complete``; nothing
after that point can undo it. Every failure leaves the flow in the state
it was in so the operator can retry.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, Self

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from festival.domain import (
    Event,
    EventId,
    EventType,
    PaymentMode,
    Registration,
    RegistrationId,
)
from festival.domain.errors import (
    DomainError,
    EventReferenceError,
    InvalidTransitionError,
    NotificationFailedError,
    ValidationError,
)
from festival.notifications.interfaces import ReceiptSender
from festival.services.event_service import EventService
from festival.services.pricing import Quote, Selection, price
from festival.services.receipts import ReceiptParams, build_receipt
from festival.services.relationships import RegistrationDraft, RelationshipMaintainer
from festival.services.setting_service import SettingService
from festival.stores.interfaces import DocumentStore

logger = logging.getLogger(__name__)


class FlowState(Enum):
    IDLE = "IDLE"
    PAYMENT = "PAYMENT"
    EMAIL = "EMAIL"
    COMPLETE = "COMPLETE"


class FlowAction(Enum):
    EDIT = "edit"
    PROCEED = "proceed"
    CANCEL = "cancel"
    COMPLETE = "complete"
    SKIP = "skip"
    SEND = "send"
    NEXT = "next"


# (from, action) -> to
TRANSITIONS: dict[tuple[FlowState, FlowAction], FlowState] = {
    (FlowState.IDLE, FlowAction.EDIT): FlowState.IDLE,
    (FlowState.IDLE, FlowAction.PROCEED): FlowState.PAYMENT,
    (FlowState.PAYMENT, FlowAction.CANCEL): FlowState.IDLE,
    (FlowState.PAYMENT, FlowAction.COMPLETE): FlowState.EMAIL,
    (FlowState.EMAIL, FlowAction.SKIP): FlowState.COMPLETE,
    (FlowState.EMAIL, FlowAction.SEND): FlowState.COMPLETE,
    (FlowState.COMPLETE, FlowAction.NEXT): FlowState.IDLE,
}

OTHER_COLLEGE = "Other"
DEFAULT_COLLEGES = ("FIEM", "FIT", OTHER_COLLEGE)
PHONE_PATTERN = re.compile(r"[0-9]{10}")


@dataclass
class ParticipantForm:
    name: str = ""
    college: str = ""
    other_college: str = ""
    email: str = ""
    phone: str = ""

    @property
    def college_name(self) -> str:
        if self.college == OTHER_COLLEGE:
            return self.other_college.strip()
        return self.college


FORM_FIELDS = frozenset(f.name for f in fields(ParticipantForm))


@dataclass(frozen=True)
class FlowConfig:
    colleges: tuple[str, ...] = DEFAULT_COLLEGES
    upi_setting: str = "upi"
    upi_note: str = "Celluloid"
    time_zone: str = "Asia/Kolkata"

    @classmethod
    def from_settings(cls) -> Self:
        conf = settings.CELERITY
        return cls(
            colleges=tuple(conf["COLLEGES"]),
            upi_setting=conf["UPI_SETTING"],
            upi_note=conf["UPI_NOTE"],
            time_zone=conf["RECEIPT_TIME_ZONE"],
        )


def validate_registration(
    form: ParticipantForm,
    selection: Selection,
    quote: Quote,
    colleges: tuple[str, ...] = DEFAULT_COLLEGES,
) -> dict[str, str]:
    """Return field errors that block moving to payment. Empty means valid."""
    errors = {}
    if not form.name.strip():
        errors["name"] = "Name is required"
    if not form.college:
        errors["college"] = "College name is required"
    elif form.college not in colleges:
        errors["college"] = "Choose a college from the list"
    elif form.college == OTHER_COLLEGE and not form.other_college.strip():
        errors["other_college"] = "Other college name is required"
    try:
        validate_email(form.email)
    except DjangoValidationError:
        errors["email"] = "Enter a valid email address"
    if not PHONE_PATTERN.fullmatch(form.phone):
        errors["phone"] = "Enter a valid 10-digit phone number"
    if not selection.events:
        errors["events"] = "Select at least one event"
    elif quote.payable <= 0:
        errors["events"] = "Selection has nothing to pay"
    return errors


class RegistrationFlow:
    """A single registration attempt, from form entry to receipt."""

    def __init__(
        self,
        store: DocumentStore,
        sender: ReceiptSender,
        config: FlowConfig | None = None,
    ) -> None:
        self._store = store
        self._events = EventService(store)
        self._settings = SettingService(store)
        self._relationships = RelationshipMaintainer(store)
        self._sender = sender
        self.config = config or FlowConfig()
        self._reset()

    def _reset(self) -> None:
        self.state = FlowState.IDLE
        self.form = ParticipantForm()
        self.selection = Selection()
        self.payment_mode = PaymentMode.CASH
        self.registration: Registration | None = None

    @property
    def quote(self) -> Quote:
        return price(self.selection)

    @property
    def errors(self) -> dict[str, str]:
        return validate_registration(self.form, self.selection, self.quote, self.config.colleges)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def update_participant(self, **values: str) -> None:
        self._target(FlowAction.EDIT)
        unknown = {name: "Unknown field" for name in values if name not in FORM_FIELDS}
        if unknown:
            raise ValidationError(unknown)
        for name, value in values.items():
            setattr(self.form, name, value)

    def toggle_event(self, event_id: str) -> None:
        self._target(FlowAction.EDIT)
        self.selection = self.selection.toggled(self._events.get_event(event_id))

    def set_payment_mode(self, mode: PaymentMode) -> None:
        self._target(FlowAction.EDIT)
        self.payment_mode = mode

    def proceed(self) -> None:
        """Move to payment once the form is valid and something is payable.

        Raises:
            ValidationError: With per-field messages; the flow stays in IDLE.
            SettingNotFoundError: If UPI was chosen but no UPI address is set.
            EventReferenceError: If a picked event was deleted meanwhile.
        """
        target = self._target(FlowAction.PROCEED)
        self._refresh_selection()
        errors = self.errors
        if errors:
            raise ValidationError(errors)
        self.payment_request()
        self._move(target)

    def _refresh_selection(self) -> None:
        """Re-read the picked events; payment is quoted on current fees and types."""
        events = [self._store.get(event_id) for event_id in self.selection.event_ids]
        missing = [
            event_id
            for event_id, event in zip(self.selection.event_ids, events)
            if event is None
        ]
        if missing:
            raise EventReferenceError(missing)
        self.selection = Selection.from_events(events)

    def payment_request(self) -> str | None:
        """Return the UPI payment URI for the payable amount, None for cash."""
        if self.payment_mode is not PaymentMode.UPI:
            return None
        address = self._settings.setting_value(self.config.upi_setting)
        return (
            f"upi://pay?pa={address}&am={self.quote.payable}"
            f"&cu=INR&tn={self.config.upi_note}"
        )

    def cancel(self) -> None:
        self._move(self._target(FlowAction.CANCEL))

    def mark_as_complete(self) -> Registration:
        """Commit the registration. On failure the flow stays in PAYMENT."""
        target = self._target(FlowAction.COMPLETE)
        draft = RegistrationDraft(
            participant_name=self.form.name.strip(),
            college_name=self.form.college_name,
            email=self.form.email,
            phone=self.form.phone,
            event_refs=self.selection.event_ids,
            amount_paid=self.quote.payable,
            payment_mode=self.payment_mode,
        )
        try:
            registration = self._relationships.create_registration(draft)
        except DomainError as exc:
            logger.warning("Registration attempt failed in %s: %s", self.state.value, exc)
            raise
        self.registration = registration
        self._move(target)
        return registration

    def receipt(self) -> ReceiptParams:
        if self.registration is None:
            raise InvalidTransitionError(self.state.value, "render a receipt")
        return build_receipt(self.registration, self.selection.events, self.config.time_zone)

    def skip(self) -> None:
        self._move(self._target(FlowAction.SKIP))

    def send_bill(self) -> None:
        """Send the receipt; only a 200 from the relay completes the flow.

        Raises:
            NotificationFailedError: The flow stays in EMAIL and may retry.
        """
        target = self._target(FlowAction.SEND)
        status = self._sender.send(self.receipt())
        if status != 200:
            raise NotificationFailedError(status)
        self._move(target)

    def next_registration(self) -> None:
        self._target(FlowAction.NEXT)
        self._reset()
        logger.info("Registration flow reset")

    def _target(self, action: FlowAction) -> FlowState:
        try:
            return TRANSITIONS[(self.state, action)]
        except KeyError:
            raise InvalidTransitionError(self.state.value, action.value) from None

    def _move(self, target: FlowState) -> None:
        logger.info("Registration flow %s -> %s", self.state.value, target.value)
        self.state = target

    def to_dict(self) -> dict[str, Any]:
        """Snapshot the flow as JSON-compatible data."""
        return {
            "state": self.state.value,
            "form": asdict(self.form),
            "selection": {
                "standard": [_event_to_dict(e) for e in self.selection.standard],
                "flash": [_event_to_dict(e) for e in self.selection.flash],
            },
            "payment_mode": self.payment_mode.value,
            "registration": (
                _registration_to_dict(self.registration) if self.registration else None
            ),
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        store: DocumentStore,
        sender: ReceiptSender,
        config: FlowConfig | None = None,
    ) -> Self:
        flow = cls(store, sender, config)
        flow.state = FlowState(data["state"])
        flow.form = ParticipantForm(**data["form"])
        flow.selection = Selection(
            standard=tuple(_event_from_dict(e) for e in data["selection"]["standard"]),
            flash=tuple(_event_from_dict(e) for e in data["selection"]["flash"]),
        )
        flow.payment_mode = PaymentMode(data["payment_mode"])
        if data["registration"]:
            flow.registration = _registration_from_dict(data["registration"])
        return flow


def _event_to_dict(event: Event) -> dict[str, Any]:
    return {
        "id": str(event.id),
        "name": event.name,
        "committee": event.committee,
        "fee": event.fee,
        "room": event.room,
        "link": event.link,
        "type": event.type.value,
        "registration_refs": [str(ref) for ref in event.registration_refs],
        "created_at": event.created_at.isoformat(),
    }


def _event_from_dict(data: Mapping[str, Any]) -> Event:
    return Event(
        id=EventId.from_string(data["id"]),
        name=data["name"],
        committee=data["committee"],
        fee=data["fee"],
        room=data["room"],
        link=data["link"],
        type=EventType(data["type"]),
        registration_refs=tuple(RegistrationId.from_string(r) for r in data["registration_refs"]),
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def _registration_to_dict(registration: Registration) -> dict[str, Any]:
    return {
        "id": str(registration.id),
        "participant_name": registration.participant_name,
        "college_name": registration.college_name,
        "email": registration.email,
        "phone": registration.phone,
        "event_refs": [str(ref) for ref in registration.event_refs],
        "amount_paid": registration.amount_paid,
        "payment_mode": registration.payment_mode.value,
        "created_at": registration.created_at.isoformat(),
    }


def _registration_from_dict(data: Mapping[str, Any]) -> Registration:
    return Registration(
        id=RegistrationId.from_string(data["id"]),
        participant_name=data["participant_name"],
        college_name=data["college_name"],
        email=data["email"],
        phone=data["phone"],
        event_refs=tuple(EventId.from_string(ref) for ref in data["event_refs"]),
        amount_paid=data["amount_paid"],
        payment_mode=PaymentMode(data["payment_mode"]),
        created_at=datetime.fromisoformat(data["created_at"]),
    )
