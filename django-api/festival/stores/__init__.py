from django.conf import settings
from django.utils.module_loading import import_string

from festival.stores.interfaces import DocumentStore, Order


def get_store() -> DocumentStore:
    """Build the document store configured in ``CELERITY["STORE"]``."""
    return import_string(settings.CELERITY["STORE"])()


__all__ = ["DocumentStore", "Order", "get_store"]
