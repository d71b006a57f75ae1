"""Shared fixtures: canned HTTP responses and Paylight record builders."""

import json
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import structlog
from requests import Response
from requests.structures import CaseInsensitiveDict

from src.paylight.models import Credentials

LOGIN_PAGE = (
    '<html><body><form id="kc-form-login" method="post" '
    'action="https://auth.pay-light.com/realms/business-account/login-actions/'
    'authenticate?session_code=abc&amp;execution=e1&amp;client_id=glenfiddich-front">'
    "</form></body></html>"
)
LOGIN_REDIRECT = "https://clinic.pay-light.com/?state=s1&session_state=ss&code=AUTH-CODE-123"


def make_response(
    status: int = 200,
    body: Any = None,
    headers: dict[str, str] | None = None,
    cookies: dict[str, str] | None = None,
    reason: str = "",
) -> Response:
    """Build a real requests.Response without touching the network."""
    response = Response()
    response.status_code = status
    response.reason = reason or ("OK" if status < 400 else "Error")
    response.headers = CaseInsensitiveDict(headers or {})
    if isinstance(body, (dict, list)):
        response._content = json.dumps(body).encode("utf-8")
        response.headers.setdefault("Content-Type", "application/json")
    else:
        response._content = (body or "").encode("utf-8")
    response.encoding = "utf-8"
    for name, value in (cookies or {}).items():
        response.cookies.set(name, value)
    return response


def token_payload(expires_in: int = 300, access_token: str = "token-1") -> dict:
    return {
        "access_token": access_token,
        "expires_in": expires_in,
        "refresh_expires_in": 1800,
        "refresh_token": "refresh",
        "token_type": "Bearer",
        "id_token": "id",
        "session_state": "ss",
        "scope": "openid profile email",
    }


def login_responses(expires_in: int = 3600, access_token: str = "token-1") -> list:
    """The three responses of one successful login, in request order."""
    return [
        make_response(200, LOGIN_PAGE, cookies={"AUTH_SESSION_ID": "sess-1"}),
        make_response(302, "", headers={"Location": LOGIN_REDIRECT}),
        make_response(200, token_payload(expires_in, access_token)),
    ]


def event_group(
    id: int = 42,
    status: str = "active",
    type: str = "booking",
    title: str = "定期検診",
    from_at: str = "2025-01-10T01:00:00.000+00:00",
    to_at: str = "2025-01-10T01:30:00.000+00:00",
    duration: int = 30,
    customer: dict | None = None,
    staffs: list[dict] | None = None,
    treatments: list[dict] | None = None,
) -> dict:
    """Raw event group dict in the shape the Paylight API returns."""
    return {
        "id": id,
        "status": status,
        "type": type,
        "title": title,
        "duration_by_minutes": duration,
        "recommended_date_from": None,
        "recommended_date_to": None,
        "from_at": from_at,
        "to_at": to_at,
        "note": "",
        "event_ids": [id * 10],
        "ai_reception_name_ruby": None,
        "details": {"updated_by": {"name": "システム", "action": "create"}},
        "created_at": "2025-01-01T00:00:00.000+00:00",
        "updated_at": "2025-01-01T00:00:00.000+00:00",
        "events": [
            {
                "id": id * 10,
                "locations": [{"id": 1, "name": "①ユニット"}],
                "staffs": staffs if staffs is not None else [],
                "menus": {"treatment": treatments if treatments is not None else []},
                "is_acknowledged": True,
                "type": "booking",
                "title": title,
                "duration_by_minutes": duration,
                "from_at": from_at,
                "to_at": to_at,
                "created_at": "2025-01-01T00:00:00.000+00:00",
                "updated_at": "2025-01-01T00:00:00.000+00:00",
            }
        ],
        "customer": customer,
    }


def customer(id: int = 7, management_id: str | None = "MID1", name: str = "山田 太郎") -> dict:
    return {
        "id": id,
        "name": name,
        "name_ruby": "ヤマダ タロウ",
        "birthday": None,
        "management_id": management_id,
        "tags": [],
        "created_at": "2024-01-01T00:00:00.000+00:00",
        "updated_at": "2024-01-01T00:00:00.000+00:00",
    }


def staff(id: int = 3, name: str = "佐藤 花子") -> dict:
    return {
        "id": id,
        "name": name,
        "type": {"id": 1, "name": "歯科医師", "abbreviation": "DR"},
        "role": {"id": 2, "name": "管理・経理"},
        "created_at": "2024-01-01T00:00:00.000+00:00",
        "updated_at": "2024-01-01T00:00:00.000+00:00",
    }


def treatment(id: int = 11, overview: str = "クリーニング") -> dict:
    return {
        "id": id,
        "display_order": 1,
        "overview": overview,
        "customer_overview": overview,
        "color": {"id": 1, "value": "#2ABEA8"},
        "category": {"id": 5, "name": "歯周病"},
        "is_active": True,
        "created_at": "2024-01-01T00:00:00.000+00:00",
        "updated_at": "2024-01-01T00:00:00.000+00:00",
    }


def events_page(values: list[dict], current: int, next_page: int | None) -> dict:
    return {
        "values": values,
        "pagination": {
            "current": current,
            "previous": current - 1 if current > 1 else None,
            "next": next_page,
            "limit_value": 500,
            "pages": 3,
            "count": 3,
        },
    }


class FakeClock:
    """Settable clock for token expiry tests."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="clinic@example.com", password="s3cret", store_id=123)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 10, 0, 0, tzinfo=timezone.utc))


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Keep library log events off stdout so CLI output can be parsed."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
    yield
    structlog.reset_defaults()
