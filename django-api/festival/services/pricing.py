"""Pricing for event selections and stall sales.

Event selections are priced as the sum of fees minus a flat combo
discount that depends only on how many flash events were chosen. Stall
sales are a plain sum of unit prices with no discount.
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Self

from festival.domain import Event, EventId, ServiceKind, ServiceLine
from festival.domain.errors import ValidationError


@dataclass(frozen=True)
class Discount:
    name: str
    value: int


# flash-event count -> combo discount
DISCOUNT_TIERS: dict[int, Discount] = {
    3: Discount("COMBO3", 10),
    4: Discount("COMBO4", 20),
    5: Discount("COMBO5", 30),
}
MAX_TIER = max(DISCOUNT_TIERS)

UNIT_PRICES: dict[ServiceKind, int] = {
    ServiceKind.TATTOO: 30,
    ServiceKind.NAIL: 30,
    ServiceKind.CARICATURE: 80,
}
COUPLE_CARICATURE_PRICE = 100


@dataclass(frozen=True)
class Selection:
    """Chosen events split into the standard and flash pools, in pick order."""

    standard: tuple[Event, ...] = ()
    flash: tuple[Event, ...] = ()

    @classmethod
    def from_events(cls, events: Iterable[Event]) -> Self:
        """Split events into pools. A repeated id keeps its first occurrence."""
        unique: dict[EventId, Event] = {}
        for event in events:
            unique.setdefault(event.id, event)
        events = tuple(unique.values())
        return cls(
            standard=tuple(e for e in events if not e.is_flash),
            flash=tuple(e for e in events if e.is_flash),
        )

    @property
    def events(self) -> tuple[Event, ...]:
        return self.standard + self.flash

    @property
    def event_ids(self) -> tuple[EventId, ...]:
        return tuple(e.id for e in self.events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self.event_ids

    def toggled(self, event: Event) -> Self:
        """Return a selection with ``event`` removed if present, appended otherwise.

        Presence is by id across both pools, so an event whose type changed
        since it was picked is still removed.
        """
        if event.id in self:
            return replace(
                self,
                standard=_without(self.standard, event.id),
                flash=_without(self.flash, event.id),
            )
        if event.is_flash:
            return replace(self, flash=self.flash + (event,))
        return replace(self, standard=self.standard + (event,))


def _without(pool: tuple[Event, ...], event_id: EventId) -> tuple[Event, ...]:
    return tuple(e for e in pool if e.id != event_id)


@dataclass(frozen=True)
class Quote:
    subtotal: int
    discount: int
    discount_name: str | None
    payable: int


def discount_for(flash_count: int) -> Discount | None:
    """Return the combo discount earned by ``flash_count`` flash events.

    Counts above the last tier keep the last tier's discount.
    """
    if flash_count > MAX_TIER:
        return DISCOUNT_TIERS[MAX_TIER]
    return DISCOUNT_TIERS.get(flash_count)


def price(selection: Selection) -> Quote:
    subtotal = sum(event.fee for event in selection.events)
    discount = discount_for(len(selection.flash))
    value = discount.value if discount else 0
    # no floor: a discount larger than the subtotal yields a negative payable
    return Quote(
        subtotal=subtotal,
        discount=value,
        discount_name=discount.name if discount else None,
        payable=subtotal - value,
    )


@dataclass(frozen=True)
class ServiceQuote:
    lines: tuple[ServiceLine, ...]

    @property
    def total(self) -> int:
        return sum(line.amount for line in self.lines)


def price_services(
    tattoo: int = 0, nail: int = 0, caricature: int = 0, couple: bool = False
) -> ServiceQuote:
    counts = {
        ServiceKind.TATTOO: tattoo,
        ServiceKind.NAIL: nail,
        ServiceKind.CARICATURE: caricature,
    }
    errors = {
        kind.value: "Count cannot be negative" for kind, count in counts.items() if count < 0
    }
    if errors:
        raise ValidationError(errors)

    lines = []
    for kind, count in counts.items():
        if count == 0:
            continue
        unit_price = UNIT_PRICES[kind]
        if kind is ServiceKind.CARICATURE and couple:
            unit_price = COUPLE_CARICATURE_PRICE
        lines.append(ServiceLine(service_kind=kind, unit_count=count, unit_price=unit_price))
    return ServiceQuote(lines=tuple(lines))
