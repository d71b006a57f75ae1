"""Pydantic models for Paylight X records and SmartCall reservations.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Upstream models ignore unknown keys so additive API changes don't break parsing.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ReservationOperation = Literal["create", "cancel"]
StaffPreference = Literal["specific", "any"]


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------
class Credentials(BaseModel):
    """Paylight login identity, fixed for the process lifetime."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)
    store_id: int


class SessionToken(BaseModel):
    """Bearer token plus the absolute instant it stops being accepted."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(repr=False)
    expires_at: datetime


class TokenResponse(BaseModel):
    """Payload of the OpenID Connect token endpoint."""

    access_token: str
    expires_in: int  # seconds
    refresh_expires_in: int | None = None
    refresh_token: str | None = None
    token_type: str | None = None
    id_token: str | None = None
    session_state: str | None = None
    scope: str | None = None


# ---------------------------------------------------------------------------
# Event groups (appointments)
# ---------------------------------------------------------------------------
class Location(BaseModel):
    id: int
    name: str = ""  # e.g. "①ユニット"


class StaffType(BaseModel):
    id: int
    name: str = ""  # e.g. "歯科医師"
    abbreviation: str = ""  # e.g. "DR"


class StaffRole(BaseModel):
    id: int
    name: str = ""


class Staff(BaseModel):
    id: int
    name: str = ""
    type: StaffType | None = None
    role: StaffRole | None = None


class MenuColor(BaseModel):
    id: int
    value: str  # hex, e.g. "#2ABEA8"


class MenuCategory(BaseModel):
    id: int
    name: str = ""


class TreatmentMenu(BaseModel):
    id: int
    overview: str = ""  # staff-facing name
    customer_overview: str = ""
    display_order: int = 0
    is_active: bool = True
    color: MenuColor | None = None
    category: MenuCategory | None = None


class Menus(BaseModel):
    treatment: list[TreatmentMenu] = Field(default_factory=list)


class Event(BaseModel):
    """A single booked slot inside an event group."""

    id: int
    type: str = ""
    title: str = ""
    duration_by_minutes: int = 0
    from_at: datetime | None = None
    to_at: datetime | None = None
    is_acknowledged: bool = False
    locations: list[Location] = Field(default_factory=list)
    staffs: list[Staff] = Field(default_factory=list)
    menus: Menus = Field(default_factory=Menus)


class Customer(BaseModel):
    """Customer summary embedded in an event group."""

    id: int
    name: str = ""
    name_ruby: str = ""
    birthday: str | None = None
    management_id: str | None = None  # patient card number
    tags: list[str] = Field(default_factory=list)


class EventGroup(BaseModel):
    """A Paylight appointment grouping one or more events.

    from_at/to_at arrive as UTC instants ("2025-01-10T01:00:00.000+00:00").
    """

    id: int
    status: str  # "active", "cancelled", "draft", ...
    type: str  # "booking", ...
    title: str = ""
    duration_by_minutes: int = 0
    from_at: datetime
    to_at: datetime
    note: str | None = None  # may hold Quill Delta JSON
    event_ids: list[int] = Field(default_factory=list)
    recommended_date_from: str | None = None
    recommended_date_to: str | None = None
    ai_reception_name_ruby: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    events: list[Event] = Field(default_factory=list)
    customer: Customer | None = None


class CustomerDetail(BaseModel):
    """Full customer record from /customers/{id}."""

    id: int
    name: str = ""
    name_ruby: str | None = None
    management_id: str | None = None
    phone_number1: str | None = None
    phone_number2: str | None = None
    phone_number3: str | None = None
    sex: str | None = None  # "male" | "female"
    birthday: str | None = None
    mail_address: str | None = None
    postal_code: str | None = None
    prefectures: str | None = None
    municipalities: str | None = None
    street: str | None = None
    address: str | None = None
    building: str | None = None
    latest_visit_date: str | None = None
    note: str | None = None
    is_ai_messaging_allowed: bool = False
    tags: list[str] = Field(default_factory=list)

    @property
    def primary_phone(self) -> str | None:
        return self.phone_number1


class Pagination(BaseModel):
    current: int
    previous: int | None = None
    next: int | None = None  # None on the last page
    limit_value: int | None = None
    pages: int | None = None
    count: int | None = None


class EventGroupsPage(BaseModel):
    """One page of the event_groups listing."""

    values: list[EventGroup]
    pagination: Pagination


# ---------------------------------------------------------------------------
# SmartCall RPA reservations (structured schema)
# ---------------------------------------------------------------------------
class SlotInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str  # YYYY-MM-DD, clinic local
    start_at: str  # HH:MM
    end_at: str  # HH:MM
    duration_min: int


class MenuInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    menu_id: str
    external_menu_id: str
    menu_name: str


class StaffInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    staff_id: str
    external_staff_id: str
    resource_name: str
    preference: StaffPreference


class CustomerInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    phone: str = ""
    patient_id: str | None = None
    notes: str | None = None


class Reservation(BaseModel):
    """SmartCall reservation operation derived from one event group.

    reservation_id is the idempotency key SmartCall matches cancels against.
    """

    model_config = ConfigDict(frozen=True)

    reservation_id: str
    operation: ReservationOperation
    external_reservation_id: str | None = None
    slot: SlotInfo
    menu: MenuInfo
    staff: StaffInfo
    customer: CustomerInfo
    cancel_reason: str | None = None


class SyncCycleRequest(BaseModel):
    """Body of a SmartCall sync-cycle job."""

    job_id: str
    external_shop_id: str
    callback_url: str
    date_from: str | None = None
    date_to: str | None = None
    reservations: list[Reservation] = Field(default_factory=list)
