"""Convert Paylight event groups into SmartCall RPA reservations.

Output uses the structured SmartCall schema (slot / menu / staff / customer).
Times are rendered in clinic local time (JST); Paylight returns UTC instants.
"""

import json
import uuid
from collections.abc import Iterable, Mapping
from datetime import date, timedelta, timezone
from typing import Any, Protocol

from src.paylight.logging import get_logger
from src.paylight.models import (
    CustomerDetail,
    CustomerInfo,
    EventGroup,
    MenuInfo,
    Reservation,
    ReservationOperation,
    SlotInfo,
    StaffInfo,
    SyncCycleRequest,
)

log = get_logger(__name__)

# Japan has no DST, so a fixed offset is exact
CLINIC_TZ = timezone(timedelta(hours=9), "JST")

UNKNOWN_CUSTOMER_NAME = "氏名 未設定"
RESERVATION_ID_PREFIX = "paylight"


class CustomerDirectory(Protocol):
    """Anything that can look up a customer's full record by ID."""

    def get_customer_detail(self, customer_id: int) -> CustomerDetail: ...


def reservation_id_for(event_group: EventGroup) -> str:
    """Build the SmartCall idempotency key for an event group.

    ``paylight-{id}``, suffixed with ``-{management_id}_{customer_id}`` when
    the customer has both.
    """
    reservation_id = f"{RESERVATION_ID_PREFIX}-{event_group.id}"
    customer = event_group.customer
    if customer is not None and customer.management_id and customer.id:
        reservation_id += f"-{customer.management_id}_{customer.id}"
    return reservation_id


def is_exportable(event_group: EventGroup) -> bool:
    """Only active bookings go to SmartCall; drafts and cancellations don't."""
    return event_group.type == "booking" and event_group.status == "active"


def _as_event_group(value: EventGroup | Mapping[str, Any]) -> EventGroup:
    if isinstance(value, EventGroup):
        return value
    return EventGroup.model_validate(value)


def convert_event_group(
    event_group: EventGroup | Mapping[str, Any],
    operation: ReservationOperation = "create",
    customers: CustomerDirectory | None = None,
) -> Reservation:
    """Map one event group to a SmartCall reservation.

    Args:
        event_group: Paylight event group (model or raw API dict).
        operation: SmartCall operation to request.
        customers: Optional lookup used to fill in the customer's phone number.
            Lookup errors propagate.

    Returns:
        The reservation record.
    """
    event_group = _as_event_group(event_group)

    start = event_group.from_at.astimezone(CLINIC_TZ)
    end = event_group.to_at.astimezone(CLINIC_TZ)

    first_event = event_group.events[0] if event_group.events else None
    first_menu = (
        first_event.menus.treatment[0]
        if first_event and first_event.menus.treatment
        else None
    )
    first_staff = first_event.staffs[0] if first_event and first_event.staffs else None

    menu_id = str(first_menu.id) if first_menu and first_menu.id else ""
    menu_name = first_menu.overview if first_menu else event_group.title
    staff_id = str(first_staff.id) if first_staff and first_staff.id else ""
    staff_name = first_staff.name if first_staff else ""

    customer = event_group.customer
    customer_name = customer.name if customer else UNKNOWN_CUSTOMER_NAME

    phone = ""
    if customers is not None and customer is not None and customer.id:
        detail = customers.get_customer_detail(customer.id)
        phone = detail.primary_phone or ""

    return Reservation(
        reservation_id=reservation_id_for(event_group),
        operation=operation,
        slot=SlotInfo(
            date=start.strftime("%Y-%m-%d"),
            start_at=start.strftime("%H:%M"),
            end_at=end.strftime("%H:%M"),
            duration_min=event_group.duration_by_minutes,
        ),
        menu=MenuInfo(menu_id=menu_id, external_menu_id=menu_id, menu_name=menu_name),
        staff=StaffInfo(
            staff_id=staff_id,
            external_staff_id=staff_id,
            resource_name=staff_name,
            preference="specific" if staff_id else "any",
        ),
        customer=CustomerInfo(name=customer_name, phone=phone),
    )


def convert_event_groups(
    event_groups: Iterable[EventGroup | Mapping[str, Any]],
    operation: ReservationOperation = "create",
    customers: CustomerDirectory | None = None,
) -> list[Reservation]:
    """Convert the exportable event groups, preserving input order.

    Non-booking and non-active groups are dropped silently. A failed customer
    lookup aborts the whole batch.
    """
    groups = [_as_event_group(eg) for eg in event_groups]
    exportable = [eg for eg in groups if is_exportable(eg)]
    reservations = [
        convert_event_group(eg, operation=operation, customers=customers)
        for eg in exportable
    ]
    log.info(
        "reservations_converted",
        received=len(groups),
        skipped=len(groups) - len(exportable),
        converted=len(reservations),
        enriched=customers is not None,
    )
    return reservations


def reservations_to_json(reservations: Iterable[Reservation]) -> str:
    """Serialize reservations as indented JSON, omitting unset optional keys."""
    payload = [r.model_dump(mode="json", exclude_none=True) for r in reservations]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def to_json(
    event_groups: Iterable[EventGroup | Mapping[str, Any]],
    operation: ReservationOperation = "create",
    customers: CustomerDirectory | None = None,
) -> str:
    """Convert event groups and serialize the reservations as JSON."""
    return reservations_to_json(
        convert_event_groups(event_groups, operation=operation, customers=customers)
    )


def build_sync_cycle_request(
    reservations: list[Reservation],
    external_shop_id: str | int,
    callback_url: str,
    date_from: date | str | None = None,
    date_to: date | str | None = None,
    job_id: str | None = None,
) -> SyncCycleRequest:
    """Wrap reservations in a SmartCall sync-cycle job request.

    SmartCall posts job results to ``callback_url`` asynchronously.
    """

    def _iso(value: date | str | None) -> str | None:
        return value.isoformat() if isinstance(value, date) else value

    return SyncCycleRequest(
        job_id=job_id or str(uuid.uuid4()),
        external_shop_id=str(external_shop_id),
        callback_url=callback_url,
        date_from=_iso(date_from),
        date_to=_iso(date_to),
        reservations=reservations,
    )
