"""Receipt parameters handed to the mail relay template."""

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from django.utils.html import format_html, format_html_join

from festival.domain import Event, Registration

CELL_STYLE = "padding:12px;border-bottom:1px solid #eee;text-align:left"
ROW_STYLE = "background-color:#fafafa"


@dataclass(frozen=True)
class ReceiptParams:
    first_name: str
    name: str
    date: str
    college: str
    total: int
    email: str
    phone: str
    events: str

    def as_template_params(self) -> dict:
        return asdict(self)


def format_receipt_date(moment: datetime, time_zone: str) -> str:
    """Format like the en-IN locale, upper-cased: ``19/10/2026, 4:08:12 PM``."""
    local = moment.astimezone(ZoneInfo(time_zone))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{local.day}/{local.month}/{local.year}, "
        f"{hour}:{local.minute:02d}:{local.second:02d} {meridiem}"
    )


def render_event_rows(events: Sequence[Event]) -> str:
    """Render the line-item ``<tbody>``: index, name, fee, room."""
    rows = format_html_join(
        "",
        '<tr style="{}"><td style="{}">{}</td><td style="{}">{}</td>'
        '<td style="{}">₹{}</td><td style="{}">{}</td></tr>',
        (
            (ROW_STYLE, CELL_STYLE, index, CELL_STYLE, event.name, CELL_STYLE, event.fee, CELL_STYLE, event.room)
            for index, event in enumerate(events, start=1)
        ),
    )
    return str(format_html("<tbody>\n{}\n</tbody>", rows))


def build_receipt(
    registration: Registration, events: Sequence[Event], time_zone: str
) -> ReceiptParams:
    """Build receipt parameters from a stored registration and the events it was priced with."""
    name = registration.participant_name
    return ReceiptParams(
        first_name=name.split()[0] if name.split() else "",
        name=name,
        date=format_receipt_date(registration.created_at, time_zone),
        college=registration.college_name,
        total=registration.amount_paid,
        email=registration.email,
        phone=registration.phone,
        events=render_event_rows(events),
    )
