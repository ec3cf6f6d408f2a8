"""Stall sales (tattoo, nail, caricature)."""

import logging

from festival.domain import PaymentMode, RecordKind, ServiceRecord
from festival.domain.errors import ValidationError
from festival.services.pricing import price_services
from festival.stores.interfaces import DocumentStore, Order

logger = logging.getLogger(__name__)


class SalesService:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def list_sales(self) -> list[ServiceRecord]:
        return self._store.query(RecordKind.SERVICE_RECORD, order=Order.DESC)

    def record_sale(
        self,
        client_name: str,
        payment_mode: PaymentMode,
        tattoo: int = 0,
        nail: int = 0,
        caricature: int = 0,
        couple: bool = False,
    ) -> ServiceRecord:
        """Price a stall sale and store it.

        Raises:
            ValidationError: If the name is blank, a count is negative, or
                nothing was sold.
        """
        if not client_name.strip():
            raise ValidationError({"client_name": "Name is required"})
        quote = price_services(tattoo=tattoo, nail=nail, caricature=caricature, couple=couple)
        if not quote.lines:
            raise ValidationError({"services": "Select at least one service"})

        record_id = self._store.insert(
            RecordKind.SERVICE_RECORD,
            {
                "client_name": client_name.strip(),
                "services": quote.lines,
                "payment_mode": payment_mode,
                "total": quote.total,
            },
        )
        logger.info("Service sale %s recorded for %d", record_id, quote.total)
        return self._store.get(record_id)
