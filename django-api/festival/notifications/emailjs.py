"""EmailJS relay for registration receipts."""

import logging
from typing import Self

import requests
from django.conf import settings

from festival.domain.errors import NotificationFailedError
from festival.notifications.interfaces import ReceiptSender
from festival.services.receipts import ReceiptParams

logger = logging.getLogger(__name__)


class EmailJSSender(ReceiptSender):
    """Posts receipt parameters to the EmailJS REST endpoint."""

    def __init__(
        self,
        service_id: str,
        template_id: str,
        user_id: str,
        url: str,
        origin: str,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.service_id = service_id
        self.template_id = template_id
        self.user_id = user_id
        self.url = url
        self.origin = origin
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> Self:
        conf = settings.CELERITY
        return cls(
            service_id=settings.EMAILJS_SERVICE_ID,
            template_id=settings.EMAILJS_TEMPLATE_ID,
            user_id=settings.EMAILJS_USER_ID,
            url=conf["EMAILJS_URL"],
            origin=conf["EMAILJS_ORIGIN"],
            timeout=conf["EMAILJS_TIMEOUT"],
        )

    def send(self, params: ReceiptParams) -> int:
        payload = {
            "service_id": self.service_id,
            "template_id": self.template_id,
            "user_id": self.user_id,
            "template_params": params.as_template_params(),
        }
        try:
            response = self.session.post(
                self.url,
                json=payload,
                # EmailJS rejects requests without an origin
                headers={"origin": self.origin},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.exception("Receipt relay unreachable for %s", params.email)
            raise NotificationFailedError() from exc

        if not response.ok:
            logger.warning(
                "Receipt relay answered %s for %s: %s",
                response.status_code,
                params.email,
                response.text,
            )
        else:
            logger.info("Receipt sent to %s", params.email)
        return response.status_code
