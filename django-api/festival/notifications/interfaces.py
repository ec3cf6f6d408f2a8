"""Receipt sender interface.

The relay is a templating mail service; callers only see the HTTP-like
status code it answers with.
"""

from abc import ABC, abstractmethod

from festival.services.receipts import ReceiptParams


class ReceiptSender(ABC):
    """Interface for delivering a rendered receipt."""

    @abstractmethod
    def send(self, params: ReceiptParams) -> int:
        """Send a receipt and return the relay's status code.

        Raises:
            NotificationFailedError: If the relay could not be reached.
        """
        ...
