"""Unit tests for the registration flow state machine.

Run with: pytest tests/test_lifecycle.py -v
"""

import pytest

from festival.domain import EventType, PaymentMode, RecordKind
from festival.domain.errors import (
    EventReferenceError,
    InvalidTransitionError,
    NotificationFailedError,
    SettingNotFoundError,
    ValidationError,
)
from festival.services.event_service import EventService
from festival.services.lifecycle import FlowState, RegistrationFlow

from tests.conftest import UPI_ADDRESS, FakeReceiptSender

PARTICIPANT = {
    "name": "Asha Roy",
    "college": "FIEM",
    "email": "asha@example.com",
    "phone": "9876543210",
}


@pytest.fixture
def catalog(make_event):
    return {
        "quiz": make_event("Quiz", 100, room="R1"),
        "debate": make_event("Debate", 150, room="R2"),
    }


@pytest.fixture
def flow(store, sender):
    return RegistrationFlow(store, sender)


def fill(flow, catalog, *names, **overrides):
    flow.update_participant(**{**PARTICIPANT, **overrides})
    for name in names:
        flow.toggle_event(str(catalog[name].id))


class TestHappyPath:
    """Tests for a registration taken from form to receipt."""

    def test_full_cycle(self, flow, store, sender, catalog):
        """IDLE -> PAYMENT -> EMAIL -> COMPLETE -> IDLE with everything recorded."""
        fill(flow, catalog, "quiz", "debate")

        flow.proceed()
        assert flow.state is FlowState.PAYMENT
        assert flow.quote.payable == 250

        registration = flow.mark_as_complete()
        assert flow.state is FlowState.EMAIL
        assert registration.amount_paid == 250
        assert registration.college_name == "FIEM"
        assert store.get(catalog["quiz"].id).registration_refs == (registration.id,)
        assert store.get(catalog["debate"].id).registration_refs == (registration.id,)

        flow.send_bill()
        assert flow.state is FlowState.COMPLETE
        [receipt] = sender.sent
        assert receipt.total == 250
        assert receipt.first_name == "Asha"
        assert "Quiz" in receipt.events and "Debate" in receipt.events

        flow.next_registration()
        assert flow.state is FlowState.IDLE
        assert flow.form.name == ""
        assert flow.selection.events == ()
        assert flow.registration is None
        assert flow.payment_mode is PaymentMode.CASH

    def test_skip_email(self, flow, sender, catalog):
        """Skipping the receipt completes without sending."""
        fill(flow, catalog, "quiz")
        flow.proceed()
        flow.mark_as_complete()
        flow.skip()
        assert flow.state is FlowState.COMPLETE
        assert sender.sent == []

    def test_other_college(self, flow, catalog):
        """Choosing Other stores the typed college name."""
        fill(flow, catalog, "quiz", college="Other", other_college="  St. Xavier's  ")
        flow.proceed()
        assert flow.mark_as_complete().college_name == "St. Xavier's"


class TestValidation:
    """Tests for the checks that gate proceed()."""

    def test_blank_form_lists_every_field(self, flow):
        """An untouched flow reports each missing input."""
        with pytest.raises(ValidationError) as exc_info:
            flow.proceed()
        assert set(exc_info.value.errors) == {"name", "college", "email", "phone", "events"}
        assert flow.state is FlowState.IDLE

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"email": "asha@"}, "email"),
            ({"phone": "98765"}, "phone"),
            ({"phone": "98765432100"}, "phone"),
            ({"college": "Elsewhere"}, "college"),
            ({"college": "Other", "other_college": " "}, "other_college"),
        ],
    )
    def test_bad_field(self, flow, catalog, overrides, field):
        """Each malformed field is reported under its own name."""
        fill(flow, catalog, "quiz", **overrides)
        assert set(flow.errors) == {field}
        assert not flow.is_valid

    def test_nothing_payable(self, flow, make_event):
        """A selection that prices to zero cannot proceed."""
        flow.update_participant(**PARTICIPANT)
        flow.toggle_event(str(make_event("Open Mic", 0).id))
        with pytest.raises(ValidationError) as exc_info:
            flow.proceed()
        assert exc_info.value.errors == {"events": "Selection has nothing to pay"}

    def test_unknown_field(self, flow):
        """update_participant rejects fields the form does not have."""
        with pytest.raises(ValidationError):
            flow.update_participant(nickname="Ash")


class TestTransitions:
    """Tests for actions taken in the wrong state."""

    def test_toggle_off_after_type_change(self, flow, store, catalog):
        """An event made flash after it was picked is deselected, not picked twice."""
        quiz = catalog["quiz"]
        fill(flow, catalog, "quiz")
        EventService(store).update_event(
            str(quiz.id), name="Quiz", committee="Cultural", fee=100, room="R1", type=EventType.FLASH
        )
        flow.toggle_event(str(quiz.id))
        assert flow.selection.events == ()
        assert flow.quote.subtotal == 0

    def test_cancel_returns_to_idle_keeping_input(self, flow, catalog):
        """Cancelling payment keeps the form and selection for editing."""
        fill(flow, catalog, "quiz")
        flow.proceed()
        flow.cancel()
        assert flow.state is FlowState.IDLE
        assert flow.form.name == "Asha Roy"
        assert flow.selection.event_ids == (catalog["quiz"].id,)

    def test_no_editing_during_payment(self, flow, catalog):
        """Fields and selection are frozen once payment starts."""
        fill(flow, catalog, "quiz")
        flow.proceed()
        with pytest.raises(InvalidTransitionError):
            flow.update_participant(name="Someone Else")
        with pytest.raises(InvalidTransitionError):
            flow.toggle_event(str(catalog["debate"].id))

    @pytest.mark.parametrize("action", ["cancel", "mark_as_complete", "skip", "send_bill", "next_registration"])
    def test_idle_rejects(self, flow, action):
        """Only editing and proceed are allowed in IDLE."""
        with pytest.raises(InvalidTransitionError):
            getattr(flow, action)()

    def test_cannot_cancel_after_commit(self, flow, catalog):
        """A committed registration cannot be cancelled."""
        fill(flow, catalog, "quiz")
        flow.proceed()
        flow.mark_as_complete()
        with pytest.raises(InvalidTransitionError):
            flow.cancel()


class TestPayment:
    """Tests for payment modes."""

    def test_cash_has_no_payment_request(self, flow, catalog):
        """Cash payments need no UPI link."""
        fill(flow, catalog, "quiz")
        flow.proceed()
        assert flow.payment_request() is None

    def test_upi_payment_request(self, flow, catalog, upi_configured):
        """UPI payments carry the address, the payable amount and the note."""
        fill(flow, catalog, "quiz", "debate")
        flow.set_payment_mode(PaymentMode.UPI)
        flow.proceed()
        assert flow.payment_request() == f"upi://pay?pa={UPI_ADDRESS}&am=250&cu=INR&tn=Celluloid"

    def test_upi_without_address(self, flow, catalog):
        """UPI cannot start when no UPI address is configured."""
        fill(flow, catalog, "quiz")
        flow.set_payment_mode(PaymentMode.UPI)
        with pytest.raises(SettingNotFoundError):
            flow.proceed()
        assert flow.state is FlowState.IDLE

    def test_combo_discount_is_charged(self, flow, store, make_event):
        """The registration records the discounted amount."""
        flow.update_participant(**PARTICIPANT)
        for i in range(3):
            flow.toggle_event(str(make_event(f"Flash {i}", 30, EventType.FLASH).id))
        flow.proceed()
        assert flow.mark_as_complete().amount_paid == 80

    def test_fee_change_before_proceed_is_charged(self, flow, store, catalog):
        """Payment is quoted on the fee current at proceed, not the fee seen when picked."""
        fill(flow, catalog, "quiz")
        EventService(store).update_event(
            str(catalog["quiz"].id), name="Quiz", committee="Cultural", fee=120, room="R1", type=EventType.STANDARD
        )
        flow.proceed()
        assert flow.quote.payable == 120
        assert flow.mark_as_complete().amount_paid == 120


class TestFailures:
    """Tests for failures that leave the flow where it was."""

    def test_deleted_event_blocks_proceed(self, flow, store, catalog):
        """Proceeding with a picked event deleted meanwhile fails and stays in IDLE."""
        fill(flow, catalog, "quiz", "debate")
        store.delete(catalog["debate"].id)

        with pytest.raises(EventReferenceError) as exc_info:
            flow.proceed()

        assert exc_info.value.missing == (catalog["debate"].id,)
        assert flow.state is FlowState.IDLE

    def test_deleted_event_keeps_payment_state(self, flow, store, catalog):
        """Completing with an event deleted meanwhile fails and nothing is stored."""
        fill(flow, catalog, "quiz", "debate")
        flow.proceed()
        store.delete(catalog["debate"].id)

        with pytest.raises(EventReferenceError):
            flow.mark_as_complete()

        assert flow.state is FlowState.PAYMENT
        assert store.query(RecordKind.REGISTRATION) == []

    def test_send_failure_stays_in_email(self, store, catalog):
        """A relay error keeps the flow in EMAIL so the operator can retry."""
        sender = FakeReceiptSender(status=500)
        flow = RegistrationFlow(store, sender)
        fill(flow, catalog, "quiz")
        flow.proceed()
        flow.mark_as_complete()

        with pytest.raises(NotificationFailedError) as exc_info:
            flow.send_bill()
        assert exc_info.value.status == 500
        assert flow.state is FlowState.EMAIL

        sender.status = 200
        flow.send_bill()
        assert flow.state is FlowState.COMPLETE
        assert len(sender.sent) == 2


class TestSnapshot:
    """Tests for to_dict/from_dict."""

    def test_round_trip_mid_flow(self, flow, store, sender, catalog):
        """A restored flow continues where the snapshot was taken."""
        fill(flow, catalog, "quiz", "debate")
        flow.proceed()
        flow.mark_as_complete()

        restored = RegistrationFlow.from_dict(flow.to_dict(), store, sender)

        assert restored.state is FlowState.EMAIL
        assert restored.form == flow.form
        assert restored.selection == flow.selection
        assert restored.registration == flow.registration
        restored.send_bill()
        assert restored.state is FlowState.COMPLETE
