from festival.handlers.views import (
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

__all__ = [
    "DashboardView",
    "EventByLinkView",
    "EventDetailView",
    "EventListView",
    "QuoteView",
    "RegistrationDetailView",
    "RegistrationFlowView",
    "RegistrationListView",
    "ServiceSaleListView",
    "SettingDetailView",
]
