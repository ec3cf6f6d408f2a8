from django.urls import path

from festival.handlers import (
    DashboardView,
    EventByLinkView,
    EventDetailView,
    EventListView,
    QuoteView,
    RegistrationDetailView,
    RegistrationFlowView,
    RegistrationListView,
    ServiceSaleListView,
    SettingDetailView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/by-link/<slug:link>", EventByLinkView.as_view(), name="event-by-link"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("registrations", RegistrationListView.as_view(), name="registration-list"),
    path(
        "registrations/<str:registration_id>",
        RegistrationDetailView.as_view(),
        name="registration-detail",
    ),
    path("quote", QuoteView.as_view(), name="quote"),
    path("dashboard", DashboardView.as_view(), name="dashboard"),
    path("settings/<str:name>", SettingDetailView.as_view(), name="setting-detail"),
    path("services", ServiceSaleListView.as_view(), name="service-list"),
    path("flow", RegistrationFlowView.as_view(), name="registration-flow"),
]
