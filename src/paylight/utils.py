"""Parsing helpers for the Paylight login flow and CLI date ranges.

The login flow depends on two fixed string shapes from the Keycloak login page:
the form's ``action="..."`` attribute and the ``code=`` parameter of the
post-login redirect. Both parsers live here so a page change is a local diff.
"""

import calendar
import re
from datetime import date

from requests import Response

from src.paylight.errors import ProtocolError

_FORM_ACTION_RE = re.compile(r'action="([^"]+)"')
_AUTH_CODE_RE = re.compile(r"[?&]code=([^&#]+)")
_YEAR_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def parse_login_action(html: str) -> str:
    """Extract the login form's POST target from the authorization page.

    Args:
        html: Body of the authorization endpoint response.

    Returns:
        Absolute action URL with ``&amp;`` decoded to ``&``.

    Raises:
        ProtocolError: If no form action is present.
    """
    match = _FORM_ACTION_RE.search(html)
    if match is None:
        raise ProtocolError("Login form action URL not found in authorization page")
    return match.group(1).replace("&amp;", "&")


def parse_authorization_code(location: str) -> str:
    """Extract the authorization code from a post-login redirect URL.

    Raises:
        ProtocolError: If the Location header carries no ``code`` parameter.
    """
    match = _AUTH_CODE_RE.search(location)
    if match is None:
        raise ProtocolError("Authorization code not found in login redirect")
    return match.group(1)


def cookie_header(response: Response) -> str:
    """Join a response's Set-Cookie name/value pairs into a Cookie header."""
    return "; ".join(f"{name}={value}" for name, value in response.cookies.items())


def join_ids(ids: list[int] | None) -> str | None:
    """Comma-join an ID filter, or None when there is nothing to filter on."""
    if not ids:
        return None
    return ",".join(str(i) for i in ids)


def parse_start_date(value: str) -> date:
    """Parse a CLI start date: YYYY-MM-DD as-is, YYYY-MM as the 1st of the month."""
    if _YEAR_MONTH_RE.match(value):
        return date.fromisoformat(f"{value}-01")
    return date.fromisoformat(value)


def parse_end_date(value: str) -> date:
    """Parse a CLI end date: YYYY-MM-DD as-is, YYYY-MM as the last day of the month."""
    if _YEAR_MONTH_RE.match(value):
        first = date.fromisoformat(f"{value}-01")
        last_day = calendar.monthrange(first.year, first.month)[1]
        return first.replace(day=last_day)
    return date.fromisoformat(value)


def resolve_date_range(
    start: str | None = None, end: str | None = None, *, today: date | None = None
) -> tuple[date, date]:
    """Turn up to two positional CLI arguments into an inclusive date range.

    No arguments means today only. A single argument covers that day, or the
    whole month for YYYY-MM. Two arguments run from the start of the first to
    the end of the second.
    """
    if start is None:
        today = today or date.today()
        return today, today
    if end is None:
        return parse_start_date(start), parse_end_date(start)
    return parse_start_date(start), parse_end_date(end)
