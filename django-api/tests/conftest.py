"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from rest_framework.test import APIClient

from festival.domain import EventType
from festival.notifications.interfaces import ReceiptSender
from festival.services.event_service import EventService
from festival.services.setting_service import SettingService
from festival.stores.memory_store import InMemoryDocumentStore

ADMIN_KEY = "admin-secret"
DESK_KEY = "desk-secret"
UPI_ADDRESS = "fest@upi"

START = datetime(2026, 2, 14, 10, 30, tzinfo=timezone.utc)


class FakeReceiptSender(ReceiptSender):
    """Records receipts instead of sending them."""

    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.sent = []

    @classmethod
    def from_settings(cls):
        return cls()

    def send(self, params):
        self.sent.append(params)
        return self.status


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """In-memory store whose clock advances one second per insert."""
    ticks = count()
    return InMemoryDocumentStore(clock=lambda: START + timedelta(seconds=next(ticks)))


@pytest.fixture
def sender() -> FakeReceiptSender:
    return FakeReceiptSender()


@pytest.fixture
def make_event(store):
    service = EventService(store)

    def make(name: str, fee: int, type: EventType = EventType.STANDARD, room: str = "R1"):
        return service.create_event(name=name, committee="Cultural", fee=fee, room=room, type=type)

    return make


@pytest.fixture
def upi_configured(store):
    SettingService(store).put_setting("upi", UPI_ADDRESS)


@pytest.fixture
def gated(db):
    """Gate keys stored in the database for API tests."""
    from festival.stores.django_store import DjangoDocumentStore

    settings = SettingService(DjangoDocumentStore())
    settings.put_setting("admin", ADMIN_KEY)
    settings.put_setting("registration", DESK_KEY)


@pytest.fixture
def admin_client(gated) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_X_GATE_KEY=ADMIN_KEY)
    return client


@pytest.fixture
def desk_client(gated) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_X_GATE_KEY=DESK_KEY)
    return client
