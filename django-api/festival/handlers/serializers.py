"""Serializers for request input and domain model responses."""

from rest_framework import serializers

from festival.domain import EventType, PaymentMode
from festival.services.lifecycle import FlowState

EVENT_TYPES = [t.value for t in EventType]
PAYMENT_MODES = [m.value for m in PaymentMode]


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.CharField()
    name = serializers.CharField()
    committee = serializers.CharField()
    fee = serializers.IntegerField()
    room = serializers.CharField()
    link = serializers.CharField()
    type = serializers.CharField(source="type.value")
    registration_refs = serializers.ListField(child=serializers.CharField())
    created_at = serializers.DateTimeField()


class EventInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    committee = serializers.CharField(max_length=255, allow_blank=True, default="")
    fee = serializers.IntegerField(min_value=0)
    room = serializers.CharField(max_length=100, allow_blank=True, default="")
    type = serializers.ChoiceField(choices=EVENT_TYPES, default=EventType.STANDARD.value)

    def validate_type(self, value: str) -> EventType:
        return EventType(value)


class RegistrationSerializer(serializers.Serializer):
    """Serializer for Registration domain model."""

    id = serializers.CharField()
    participant_name = serializers.CharField()
    college_name = serializers.CharField()
    email = serializers.CharField()
    phone = serializers.CharField()
    event_refs = serializers.ListField(child=serializers.CharField())
    amount_paid = serializers.IntegerField()
    payment_mode = serializers.CharField(source="payment_mode.value")
    created_at = serializers.DateTimeField()


class EventRegistrationsSerializer(serializers.Serializer):
    event = EventSerializer()
    registrations = RegistrationSerializer(many=True)


class QuoteInputSerializer(serializers.Serializer):
    event_ids = serializers.ListField(child=serializers.CharField(), allow_empty=True)


class QuoteSerializer(serializers.Serializer):
    subtotal = serializers.IntegerField()
    discount = serializers.IntegerField()
    discount_name = serializers.CharField(allow_null=True)
    payable = serializers.IntegerField()


class EventTallySerializer(serializers.Serializer):
    event_id = serializers.CharField()
    name = serializers.CharField()
    registrations = serializers.IntegerField()


class InconsistencySerializer(serializers.Serializer):
    event_id = serializers.CharField()
    registration_id = serializers.CharField()
    problem = serializers.CharField(source="problem.value")


class DashboardSerializer(serializers.Serializer):
    total_collected = serializers.IntegerField()
    registration_count = serializers.IntegerField()
    events = EventTallySerializer(many=True)


class SettingSerializer(serializers.Serializer):
    name = serializers.CharField()
    value = serializers.CharField()


class SettingInputSerializer(serializers.Serializer):
    value = serializers.CharField(max_length=500, allow_blank=True)


class ServiceLineSerializer(serializers.Serializer):
    service_kind = serializers.CharField(source="service_kind.value")
    unit_count = serializers.IntegerField()
    unit_price = serializers.IntegerField()


class ServiceRecordSerializer(serializers.Serializer):
    id = serializers.CharField()
    client_name = serializers.CharField()
    services = ServiceLineSerializer(many=True)
    payment_mode = serializers.CharField(source="payment_mode.value")
    total = serializers.IntegerField()
    created_at = serializers.DateTimeField()


class ServiceSaleInputSerializer(serializers.Serializer):
    client_name = serializers.CharField(max_length=255, allow_blank=True)
    payment_mode = serializers.ChoiceField(choices=PAYMENT_MODES, default=PaymentMode.CASH.value)
    tattoo = serializers.IntegerField(min_value=0, default=0)
    nail = serializers.IntegerField(min_value=0, default=0)
    caricature = serializers.IntegerField(min_value=0, default=0)
    couple = serializers.BooleanField(default=False)

    def validate_payment_mode(self, value: str) -> PaymentMode:
        return PaymentMode(value)


FLOW_ACTIONS = [
    "update",
    "toggle_event",
    "set_payment_mode",
    "proceed",
    "cancel",
    "complete",
    "skip",
    "send",
    "next",
]


class FlowActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=FLOW_ACTIONS)
    participant = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)
    event_id = serializers.CharField(required=False)
    payment_mode = serializers.ChoiceField(choices=PAYMENT_MODES, required=False)

    def validate(self, attrs):
        required = {"update": "participant", "toggle_event": "event_id", "set_payment_mode": "payment_mode"}
        needed = required.get(attrs["action"])
        if needed and needed not in attrs:
            raise serializers.ValidationError({needed: "This field is required."})
        return attrs


class FlowSerializer(serializers.Serializer):
    """Serializer for the operator's RegistrationFlow."""

    state = serializers.CharField(source="state.value")
    form = serializers.SerializerMethodField()
    events = serializers.SerializerMethodField()
    payment_mode = serializers.CharField(source="payment_mode.value")
    quote = QuoteSerializer()
    field_errors = serializers.SerializerMethodField()
    payment_request = serializers.SerializerMethodField()
    registration = RegistrationSerializer(allow_null=True)

    def get_form(self, flow) -> dict:
        return {
            "name": flow.form.name,
            "college": flow.form.college,
            "other_college": flow.form.other_college,
            "email": flow.form.email,
            "phone": flow.form.phone,
        }

    def get_events(self, flow) -> list[dict]:
        return [
            {"id": str(e.id), "name": e.name, "fee": e.fee, "room": e.room, "type": e.type.value}
            for e in flow.selection.events
        ]

    def get_field_errors(self, flow) -> dict:
        return flow.errors if flow.state is FlowState.IDLE else {}

    def get_payment_request(self, flow) -> str | None:
        return flow.payment_request() if flow.state is FlowState.PAYMENT else None
