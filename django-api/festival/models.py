"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
Reference lists are stored as JSON arrays of id strings; there is no join
table between events and registrations.
"""

import uuid

from django.db import models

from festival.domain import EventType, PaymentMode


class Event(models.Model):
    """Persistence model for festival events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    committee = models.CharField(max_length=255)
    fee = models.PositiveIntegerField()
    room = models.CharField(max_length=100)
    link = models.SlugField(max_length=255, unique=True)
    type = models.CharField(
        max_length=16,
        choices=[(t.value, t.value) for t in EventType],
        default=EventType.STANDARD.value,
    )
    registration_refs = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Registration(models.Model):
    """Persistence model for participant registrations."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    participant_name = models.CharField(max_length=255)
    college_name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=10)
    event_refs = models.JSONField(default=list)
    amount_paid = models.IntegerField()
    payment_mode = models.CharField(
        max_length=8, choices=[(m.value, m.value) for m in PaymentMode]
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="registration_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.participant_name} - {self.amount_paid}"


class ServiceRecord(models.Model):
    """Persistence model for stall sales."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client_name = models.CharField(max_length=255)
    services = models.JSONField(default=list)
    payment_mode = models.CharField(
        max_length=8, choices=[(m.value, m.value) for m in PaymentMode]
    )
    total = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.client_name} - {self.total}"


class Setting(models.Model):
    """Persistence model for named settings."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=500)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name
