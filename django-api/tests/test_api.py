"""Integration tests for the HTTP API.

Run with: pytest tests/test_api.py -v
"""

from uuid import uuid4

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from festival.signals import EVENT_LIST_CACHE_KEY

PARTICIPANT = {
    "name": "Asha Roy",
    "college": "FIEM",
    "email": "asha@example.com",
    "phone": "9876543210",
}


def create_event(client: APIClient, name: str, fee: int, type: str = "STANDARD") -> dict:
    response = client.post(
        "/api/events",
        {"name": name, "committee": "Cultural", "fee": fee, "room": "R1", "type": type},
        format="json",
    )
    assert response.status_code == 201, response.data
    return response.data


@pytest.fixture
def fake_sender(settings):
    settings.CELERITY = {**settings.CELERITY, "RECEIPT_SENDER": "tests.conftest.FakeReceiptSender"}


@pytest.mark.django_db
class TestGates:
    """Tests for shared-secret access gates."""

    def test_missing_key_rejected(self, gated, api_client: APIClient):
        """Gated endpoints answer 403 without a key."""
        response = api_client.get("/api/events")
        assert response.status_code == 403
        assert response.data["code"] == "GATE_REJECTED"

    def test_desk_key_cannot_administer(self, desk_client: APIClient):
        """The registration desk key does not open admin endpoints."""
        assert desk_client.get("/api/registrations").status_code == 403
        assert desk_client.post("/api/events", {"name": "Quiz", "fee": 1}, format="json").status_code == 403

    def test_admin_key_opens_desk_endpoints(self, admin_client: APIClient):
        """The admin key is accepted wherever the desk key is."""
        assert admin_client.get("/api/events").status_code == 200

    def test_event_page_is_public(self, admin_client: APIClient, api_client: APIClient):
        """The per-event page needs no key."""
        create_event(admin_client, "Quiz", 100)
        response = api_client.get("/api/events/by-link/quiz")
        assert response.status_code == 200
        assert response.data["event"]["name"] == "Quiz"
        assert response.data["registrations"] == []


@pytest.mark.django_db
class TestEventList:
    """Tests for GET/POST /api/events"""

    def test_create_and_list(self, admin_client: APIClient):
        """Created events appear in the list, ordered by name."""
        created = create_event(admin_client, "Quiz", 100)
        create_event(admin_client, "Debate", 150, type="FLASH")

        assert created["link"] == "quiz"
        assert created["registration_refs"] == []
        response = admin_client.get("/api/events")
        assert [e["name"] for e in response.data] == ["Debate", "Quiz"]
        assert response.data[0]["type"] == "FLASH"

    def test_list_is_cached_until_an_event_changes(self, admin_client: APIClient):
        """The list is served from cache and dropped on the next write."""
        create_event(admin_client, "Quiz", 100)
        admin_client.get("/api/events")
        assert cache.get(EVENT_LIST_CACHE_KEY) is not None

        create_event(admin_client, "Debate", 150)
        assert cache.get(EVENT_LIST_CACHE_KEY) is None
        assert len(admin_client.get("/api/events").data) == 2

    def test_duplicate_name(self, admin_client: APIClient):
        """A second event with the same name is a conflict."""
        create_event(admin_client, "Quiz", 100)
        response = admin_client.post("/api/events", {"name": "Quiz", "fee": 5}, format="json")
        assert response.status_code == 409
        assert response.data["code"] == "DUPLICATE_RECORD"

    def test_negative_fee(self, admin_client: APIClient):
        """Negative fees are rejected at input."""
        response = admin_client.post("/api/events", {"name": "Quiz", "fee": -5}, format="json")
        assert response.status_code == 400


@pytest.mark.django_db
class TestEventDetail:
    """Tests for /api/events/{id}"""

    def test_get_event_returns_details(self, admin_client: APIClient):
        """Given event exists, returns event details."""
        created = create_event(admin_client, "Quiz", 100)
        response = admin_client.get(f"/api/events/{created['id']}")
        assert response.status_code == 200
        assert response.data["fee"] == 100

    def test_get_event_not_found(self, admin_client: APIClient):
        """Given event does not exist, returns 404."""
        response = admin_client.get(f"/api/events/{uuid4()}")
        assert response.status_code == 404
        assert response.data["code"] == "EVENT_NOT_FOUND"

    def test_get_event_invalid_id_format(self, admin_client: APIClient):
        """Given invalid UUID, returns 400."""
        response = admin_client.get("/api/events/not-a-uuid")
        assert response.status_code == 400
        assert response.data["code"] == "INVALID_ID"

    def test_update_event(self, admin_client: APIClient):
        """PUT replaces descriptive fields."""
        created = create_event(admin_client, "Quiz", 100)
        response = admin_client.put(
            f"/api/events/{created['id']}",
            {"name": "Quiz", "committee": "Literary", "fee": 120, "room": "R9", "type": "FLASH"},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["fee"] == 120
        assert response.data["link"] == "quiz"

    def test_delete_event(self, admin_client: APIClient):
        """DELETE removes the event."""
        created = create_event(admin_client, "Quiz", 100)
        assert admin_client.delete(f"/api/events/{created['id']}").status_code == 204
        assert admin_client.get(f"/api/events/{created['id']}").status_code == 404


@pytest.mark.django_db
class TestQuote:
    """Tests for POST /api/quote"""

    def test_quote_with_combo(self, admin_client: APIClient, desk_client: APIClient):
        """Three flash events earn the first combo discount."""
        ids = [create_event(admin_client, f"Flash {i}", 30, type="FLASH")["id"] for i in range(3)]
        response = desk_client.post("/api/quote", {"event_ids": ids}, format="json")
        assert response.status_code == 200
        assert response.data == {"subtotal": 90, "discount": 10, "discount_name": "COMBO3", "payable": 80}

    def test_repeated_id_counts_once(self, admin_client: APIClient, desk_client: APIClient):
        """Listing one flash event three times neither triples the fee nor earns a combo."""
        flash = create_event(admin_client, "Flash", 30, type="FLASH")["id"]
        response = desk_client.post("/api/quote", {"event_ids": [flash, flash, flash]}, format="json")
        assert response.status_code == 200
        assert response.data == {"subtotal": 30, "discount": 0, "discount_name": None, "payable": 30}


@pytest.mark.django_db
class TestSettings:
    """Tests for /api/settings/{name}"""

    def test_put_then_get(self, admin_client: APIClient):
        """PUT creates a setting that GET then returns."""
        assert admin_client.put("/api/settings/upi", {"value": "fest@upi"}, format="json").status_code == 200
        response = admin_client.get("/api/settings/upi")
        assert response.data == {"name": "upi", "value": "fest@upi"}

    def test_missing_setting(self, admin_client: APIClient):
        """Reading or patching an unset setting is a 404."""
        assert admin_client.get("/api/settings/upi").status_code == 404
        response = admin_client.patch("/api/settings/upi", {"value": "x"}, format="json")
        assert response.status_code == 404
        assert response.data["code"] == "SETTING_NOT_FOUND"


@pytest.mark.django_db
class TestServiceSales:
    """Tests for /api/services"""

    def test_record_and_list(self, admin_client: APIClient, desk_client: APIClient):
        """The desk records a sale; admins list it."""
        response = desk_client.post(
            "/api/services", {"client_name": "Ravi", "tattoo": 2, "caricature": 1}, format="json"
        )
        assert response.status_code == 201
        assert response.data["total"] == 140
        assert response.data["payment_mode"] == "CASH"

        [sale] = admin_client.get("/api/services").data
        assert sale["client_name"] == "Ravi"

    def test_nothing_sold(self, desk_client: APIClient):
        """An empty sale is rejected with field errors."""
        response = desk_client.post("/api/services", {"client_name": "Ravi"}, format="json")
        assert response.status_code == 400
        assert "services" in response.data["errors"]


@pytest.mark.django_db
class TestRegistrationFlow:
    """Tests for /api/flow and the registration endpoints it feeds."""

    def act(self, client: APIClient, action: str, **data):
        return client.post("/api/flow", {"action": action, **data}, format="json")

    def test_full_registration(self, fake_sender, admin_client: APIClient, desk_client: APIClient):
        """A desk operator takes a participant from form to receipt."""
        quiz = create_event(admin_client, "Quiz", 100)
        debate = create_event(admin_client, "Debate", 150)

        response = self.act(desk_client, "update", participant=PARTICIPANT)
        assert response.data["state"] == "IDLE"
        assert response.data["field_errors"] == {"events": "Select at least one event"}

        self.act(desk_client, "toggle_event", event_id=quiz["id"])
        response = self.act(desk_client, "toggle_event", event_id=debate["id"])
        assert response.data["quote"]["payable"] == 250

        response = self.act(desk_client, "proceed")
        assert response.data["state"] == "PAYMENT"
        assert response.data["payment_request"] is None

        response = self.act(desk_client, "complete")
        assert response.data["state"] == "EMAIL"
        registration = response.data["registration"]
        assert registration["amount_paid"] == 250

        response = self.act(desk_client, "send")
        assert response.data["state"] == "COMPLETE"

        response = self.act(desk_client, "next")
        assert response.data["state"] == "IDLE"
        assert response.data["registration"] is None

        page = admin_client.get("/api/events/by-link/quiz").data
        assert [r["id"] for r in page["registrations"]] == [registration["id"]]
        dashboard = admin_client.get("/api/dashboard").data
        assert dashboard["total_collected"] == 250
        assert dashboard["inconsistencies"] == []

    def test_invalid_form_stays_idle(self, fake_sender, desk_client: APIClient):
        """Proceeding with a bad form reports field errors."""
        response = self.act(desk_client, "proceed")
        assert response.status_code == 400
        assert set(response.data["errors"]) == {"name", "college", "email", "phone", "events"}
        assert desk_client.get("/api/flow").data["state"] == "IDLE"

    def test_action_not_allowed(self, fake_sender, desk_client: APIClient):
        """Actions outside the current state are conflicts."""
        response = self.act(desk_client, "send")
        assert response.status_code == 409
        assert response.data["code"] == "INVALID_TRANSITION"

    def test_missing_action_payload(self, fake_sender, desk_client: APIClient):
        """Actions that need a payload say which field is missing."""
        response = self.act(desk_client, "toggle_event")
        assert response.status_code == 400
        assert "event_id" in response.data

    def test_upi_payment_request(self, fake_sender, admin_client: APIClient, desk_client: APIClient):
        """The payment state carries the UPI link."""
        admin_client.put("/api/settings/upi", {"value": "fest@upi"}, format="json")
        quiz = create_event(admin_client, "Quiz", 100)
        self.act(desk_client, "update", participant=PARTICIPANT)
        self.act(desk_client, "toggle_event", event_id=quiz["id"])
        self.act(desk_client, "set_payment_mode", payment_mode="UPI")

        response = self.act(desk_client, "proceed")

        assert response.data["payment_request"] == "upi://pay?pa=fest@upi&am=100&cu=INR&tn=Celluloid"

    def test_delete_registration(self, fake_sender, admin_client: APIClient, desk_client: APIClient):
        """Deleting a registration removes it from its events."""
        quiz = create_event(admin_client, "Quiz", 100)
        self.act(desk_client, "update", participant=PARTICIPANT)
        self.act(desk_client, "toggle_event", event_id=quiz["id"])
        self.act(desk_client, "proceed")
        registration = self.act(desk_client, "complete").data["registration"]

        assert admin_client.delete(f"/api/registrations/{registration['id']}").status_code == 204
        assert admin_client.get(f"/api/events/{quiz['id']}").data["registration_refs"] == []
        response = admin_client.delete(f"/api/registrations/{registration['id']}")
        assert response.status_code == 404
        assert response.data["code"] == "REGISTRATION_NOT_FOUND"
