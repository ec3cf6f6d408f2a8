"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain error mapping to handlers.errors
- Never contain business logic
"""

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from festival.domain import PaymentMode
from festival.domain.errors import RegistrationNotFoundError
from festival.handlers.permissions import ADMIN, DESK
from festival.handlers.serializers import (
    DashboardSerializer,
    EventInputSerializer,
    EventRegistrationsSerializer,
    EventSerializer,
    FlowActionSerializer,
    FlowSerializer,
    InconsistencySerializer,
    QuoteInputSerializer,
    QuoteSerializer,
    RegistrationSerializer,
    ServiceRecordSerializer,
    ServiceSaleInputSerializer,
    SettingInputSerializer,
    SettingSerializer,
)
from festival.notifications import get_receipt_sender
from festival.services.event_service import EventService
from festival.services.lifecycle import FlowConfig, RegistrationFlow
from festival.services.pricing import Selection, price
from festival.services.relationships import RelationshipMaintainer
from festival.services.sales_service import SalesService
from festival.services.setting_service import SettingService
from festival.signals import EVENT_LIST_CACHE_KEY
from festival.stores import get_store

FLOW_SESSION_KEY = "registration_flow"


class EventListView(APIView):
    """Handler for GET/POST /api/events"""

    gates = {"GET": DESK, "POST": ADMIN}

    def get(self, request: Request) -> Response:
        data = cache.get(EVENT_LIST_CACHE_KEY)
        if data is None:
            events = EventService(get_store()).list_events()
            data = EventSerializer(events, many=True).data
            cache.set(
                EVENT_LIST_CACHE_KEY, data, settings.CELERITY["EVENT_LIST_CACHE_TTL"]
            )
        return Response(data)

    def post(self, request: Request) -> Response:
        serializer = EventInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = EventService(get_store()).create_event(**serializer.validated_data)
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """Handler for GET/PUT/DELETE /api/events/{event_id}"""

    gates = {"GET": DESK, "PUT": ADMIN, "DELETE": ADMIN}

    def get(self, request: Request, event_id: str) -> Response:
        event = EventService(get_store()).get_event(event_id)
        return Response(EventSerializer(event).data)

    def put(self, request: Request, event_id: str) -> Response:
        serializer = EventInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = EventService(get_store()).update_event(event_id, **serializer.validated_data)
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        EventService(get_store()).delete_event(event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventByLinkView(APIView):
    """Handler for GET /api/events/by-link/{link} (public event page)"""

    def get(self, request: Request, link: str) -> Response:
        event, registrations = EventService(get_store()).registrations_for_event(link)
        data = EventRegistrationsSerializer(
            {"event": event, "registrations": registrations}
        ).data
        return Response(data)


class RegistrationListView(APIView):
    """Handler for GET /api/registrations"""

    gates = {"GET": ADMIN}

    def get(self, request: Request) -> Response:
        registrations = EventService(get_store()).list_registrations()
        return Response(RegistrationSerializer(registrations, many=True).data)


class RegistrationDetailView(APIView):
    """Handler for DELETE /api/registrations/{registration_id}"""

    gates = {"DELETE": ADMIN}

    def delete(self, request: Request, registration_id: str) -> Response:
        if not EventService(get_store()).delete_registration(registration_id):
            raise RegistrationNotFoundError(registration_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class QuoteView(APIView):
    """Handler for POST /api/quote"""

    gates = {"POST": DESK}

    def post(self, request: Request) -> Response:
        serializer = QuoteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = EventService(get_store())
        events = [service.get_event(event_id) for event_id in serializer.validated_data["event_ids"]]
        return Response(QuoteSerializer(price(Selection.from_events(events))).data)


class DashboardView(APIView):
    """Handler for GET /api/dashboard"""

    gates = {"GET": ADMIN}

    def get(self, request: Request) -> Response:
        store = get_store()
        data = dict(DashboardSerializer(EventService(store).dashboard()).data)
        data["inconsistencies"] = InconsistencySerializer(
            RelationshipMaintainer(store).find_inconsistencies(), many=True
        ).data
        return Response(data)


class SettingDetailView(APIView):
    """Handler for GET/PUT/PATCH /api/settings/{name}"""

    gates = {"GET": ADMIN, "PUT": ADMIN, "PATCH": ADMIN}

    def get(self, request: Request, name: str) -> Response:
        service = SettingService(get_store())
        return Response({"name": name, "value": service.setting_value(name)})

    def put(self, request: Request, name: str) -> Response:
        serializer = SettingInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        setting = SettingService(get_store()).put_setting(name, serializer.validated_data["value"])
        return Response(SettingSerializer(setting).data)

    def patch(self, request: Request, name: str) -> Response:
        serializer = SettingInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        setting = SettingService(get_store()).update_setting(
            name, serializer.validated_data["value"]
        )
        return Response(SettingSerializer(setting).data)


class ServiceSaleListView(APIView):
    """Handler for GET/POST /api/services"""

    gates = {"GET": ADMIN, "POST": DESK}

    def get(self, request: Request) -> Response:
        sales = SalesService(get_store()).list_sales()
        return Response(ServiceRecordSerializer(sales, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = ServiceSaleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = SalesService(get_store()).record_sale(**serializer.validated_data)
        return Response(ServiceRecordSerializer(record).data, status=status.HTTP_201_CREATED)


class RegistrationFlowView(APIView):
    """Handler for GET/POST /api/flow

    The operator's flow lives in their session. POST applies one action;
    a failed action leaves the flow in the state it was in.
    """

    gates = {"GET": DESK, "POST": DESK}

    actions = {
        "update": lambda flow, data: flow.update_participant(**data["participant"]),
        "toggle_event": lambda flow, data: flow.toggle_event(data["event_id"]),
        "set_payment_mode": lambda flow, data: flow.set_payment_mode(
            PaymentMode(data["payment_mode"])
        ),
        "proceed": lambda flow, data: flow.proceed(),
        "cancel": lambda flow, data: flow.cancel(),
        "complete": lambda flow, data: flow.mark_as_complete(),
        "skip": lambda flow, data: flow.skip(),
        "send": lambda flow, data: flow.send_bill(),
        "next": lambda flow, data: flow.next_registration(),
    }

    def get(self, request: Request) -> Response:
        return Response(FlowSerializer(self._load(request)).data)

    def post(self, request: Request) -> Response:
        serializer = FlowActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        flow = self._load(request)
        try:
            self.actions[serializer.validated_data["action"]](flow, serializer.validated_data)
        finally:
            request.session[FLOW_SESSION_KEY] = flow.to_dict()
        return Response(FlowSerializer(flow).data)

    def _load(self, request: Request) -> RegistrationFlow:
        store = get_store()
        sender = get_receipt_sender()
        config = FlowConfig.from_settings()
        snapshot = request.session.get(FLOW_SESSION_KEY)
        if snapshot is None:
            return RegistrationFlow(store, sender, config)
        return RegistrationFlow.from_dict(snapshot, store, sender, config)
