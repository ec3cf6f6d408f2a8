from django.conf import settings
from django.utils.module_loading import import_string

from festival.notifications.interfaces import ReceiptSender


def get_receipt_sender() -> ReceiptSender:
    """Build the sender configured in ``CELERITY["RECEIPT_SENDER"]``."""
    sender_class = import_string(settings.CELERITY["RECEIPT_SENDER"])
    return sender_class.from_settings()


__all__ = ["ReceiptSender", "get_receipt_sender"]
