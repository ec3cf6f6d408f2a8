"""Django ORM implementation of the DocumentStore."""

import functools
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Model

from festival import models
from festival.domain import (
    Event,
    EventId,
    EventType,
    PaymentMode,
    Record,
    RecordId,
    RecordKind,
    Registration,
    RegistrationId,
    ServiceKind,
    ServiceLine,
    ServiceRecord,
    ServiceRecordId,
    Setting,
    SettingId,
)
from festival.domain.errors import DuplicateRecordError, RecordMissingError, StoreUnavailableError
from festival.stores.interfaces import DocumentStore, Order, index_field

logger = logging.getLogger(__name__)

MODELS: dict[RecordKind, type[Model]] = {
    RecordKind.EVENT: models.Event,
    RecordKind.REGISTRATION: models.Registration,
    RecordKind.SERVICE_RECORD: models.ServiceRecord,
    RecordKind.SETTING: models.Setting,
}


def _guarded(method):
    """Translate database failures into domain errors."""

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except IntegrityError as exc:
            raise DuplicateRecordError("key") from exc
        except DatabaseError as exc:
            logger.exception("Document store failure in %s", method.__name__)
            raise StoreUnavailableError() from exc

    return wrapper


def _clashing_field(model: type[Model], columns: Mapping[str, Any], pk: Any = None) -> str:
    """Name the unique column whose value is already taken by another row."""
    for field in model._meta.fields:
        if not field.unique or field.primary_key or field.name not in columns:
            continue
        others = model.objects.filter(**{field.name: columns[field.name]})
        if pk is not None:
            others = others.exclude(pk=pk)
        if others.exists():
            return field.name
    return "key"


def _to_column(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_to_column(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (EventId, RegistrationId, ServiceRecordId, SettingId)):
        return str(value)
    if isinstance(value, ServiceLine):
        return {
            "service": value.service_kind.value,
            "count": value.unit_count,
            "price": value.unit_price,
        }
    return value


def _to_domain(kind: RecordKind, row: Any) -> Record:
    if kind is RecordKind.EVENT:
        return Event(
            id=EventId(row.id),
            name=row.name,
            committee=row.committee,
            fee=row.fee,
            room=row.room,
            link=row.link,
            type=EventType(row.type),
            registration_refs=tuple(
                RegistrationId.from_string(ref) for ref in row.registration_refs
            ),
            created_at=row.created_at,
        )
    if kind is RecordKind.REGISTRATION:
        return Registration(
            id=RegistrationId(row.id),
            participant_name=row.participant_name,
            college_name=row.college_name,
            email=row.email,
            phone=row.phone,
            event_refs=tuple(EventId.from_string(ref) for ref in row.event_refs),
            amount_paid=row.amount_paid,
            payment_mode=PaymentMode(row.payment_mode),
            created_at=row.created_at,
        )
    if kind is RecordKind.SERVICE_RECORD:
        return ServiceRecord(
            id=ServiceRecordId(row.id),
            client_name=row.client_name,
            services=tuple(
                ServiceLine(
                    service_kind=ServiceKind(line["service"]),
                    unit_count=line["count"],
                    unit_price=line["price"],
                )
                for line in row.services
            ),
            payment_mode=PaymentMode(row.payment_mode),
            total=row.total,
            created_at=row.created_at,
        )
    return Setting(
        id=SettingId(row.id),
        name=row.name,
        value=row.value,
        created_at=row.created_at,
    )


class DjangoDocumentStore(DocumentStore):
    """Database-backed document store using Django ORM."""

    @_guarded
    def insert(self, kind: RecordKind, fields: Mapping[str, Any]) -> RecordId:
        model = MODELS[kind]
        columns = {name: _to_column(value) for name, value in fields.items()}
        try:
            with transaction.atomic():
                row = model.objects.create(**columns)
        except IntegrityError as exc:
            raise DuplicateRecordError(_clashing_field(model, columns)) from exc
        return _to_domain(kind, row).id

    @_guarded
    def get(self, record_id: RecordId) -> Record | None:
        row = MODELS[record_id.kind].objects.filter(pk=record_id.value).first()
        if row is None:
            return None
        return _to_domain(record_id.kind, row)

    @_guarded
    def patch(self, record_id: RecordId, fields: Mapping[str, Any]) -> None:
        row = MODELS[record_id.kind].objects.filter(pk=record_id.value).first()
        if row is None:
            raise RecordMissingError(record_id)
        columns = {name: _to_column(value) for name, value in fields.items()}
        for name, value in columns.items():
            setattr(row, name, value)
        # post_save receivers must observe every patch
        try:
            with transaction.atomic():
                row.save(update_fields=list(columns))
        except IntegrityError as exc:
            raise DuplicateRecordError(_clashing_field(type(row), columns, row.pk)) from exc

    @_guarded
    def delete(self, record_id: RecordId) -> None:
        MODELS[record_id.kind].objects.filter(pk=record_id.value).delete()

    @_guarded
    def query(
        self,
        kind: RecordKind,
        index: str | None = None,
        value: Any = None,
        order: Order = Order.ASC,
    ) -> list[Record]:
        queryset = MODELS[kind].objects.all()
        field = index_field(kind, index) if index else "created_at"
        if index and value is not None:
            queryset = queryset.filter(**{field: _to_column(value)})
        ordering = field if order is Order.ASC else f"-{field}"
        return [_to_domain(kind, row) for row in queryset.order_by(ordering)]
