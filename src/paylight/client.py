"""Paylight X REST client for event groups and customer details.

All requests carry the bearer token from a shared TokenManager and the
Origin/Referer headers of the clinic web client, which the API checks.
"""

from datetime import date
from typing import Any

import requests

from src.paylight.auth import TokenManager
from src.paylight.errors import UpstreamError
from src.paylight.logging import get_logger
from src.paylight.models import CustomerDetail, EventGroup, EventGroupsPage
from src.paylight.utils import join_ids

logger = get_logger(__name__)

API_BASE_URL = "https://api.clinic.pay-light.com"
WEB_ORIGIN = "https://clinic.pay-light.com"
DEFAULT_PER_PAGE = 500


def _date_param(value: date | str) -> str:
    return value.isoformat() if isinstance(value, date) else value


class PaylightClient:
    """Authenticated access to one Paylight store."""

    def __init__(
        self, token_manager: TokenManager, http: requests.Session | None = None
    ) -> None:
        self.token_manager = token_manager
        self._http = http or requests.Session()

    @property
    def store_url(self) -> str:
        return f"{API_BASE_URL}/v2/stores/{self.token_manager.store_id}"

    def _get(self, url: str, failure: str, params: dict[str, Any] | None = None) -> Any:
        """GET with a fresh bearer token; non-2xx raises UpstreamError.

        A 401 also drops the held token so the next call logs in again.
        """
        token = self.token_manager.get_valid_token()
        response = self._http.get(
            url,
            params=params,
            headers={
                "Authorization": f"Bearer {token}",
                "Origin": WEB_ORIGIN,
                "Referer": f"{WEB_ORIGIN}/",
            },
        )
        if not response.ok:
            if response.status_code == 401:
                self.token_manager.invalidate()
            raise UpstreamError(failure, response.status_code, response.reason or "")
        return response.json()

    def get_event_groups(
        self,
        date_from: date | str,
        date_to: date | str,
        per: int = DEFAULT_PER_PAGE,
        staff_ids: list[int] | None = None,
        location_ids: list[int] | None = None,
        page: int | None = None,
    ) -> EventGroupsPage:
        """Fetch one page of event groups for an inclusive date range.

        Args:
            date_from: First day (date or YYYY-MM-DD).
            date_to: Last day (date or YYYY-MM-DD).
            per: Page size.
            staff_ids: Only groups assigned to these staff members.
            location_ids: Only groups in these locations (units).
            page: 1-based page number; the API defaults to the first page.

        Raises:
            UpstreamError: On a non-2xx response.
        """
        params: dict[str, Any] = {
            "date_from": _date_param(date_from),
            "date_to": _date_param(date_to),
            "per": per,
        }
        if page is not None:
            params["page"] = page
        if staff := join_ids(staff_ids):
            params["staff_ids"] = staff
        if locations := join_ids(location_ids):
            params["location_ids"] = locations

        data = self._get(
            f"{self.store_url}/event_groups", "Event group fetch failed", params
        )
        result = EventGroupsPage.model_validate(data)
        logger.debug(
            "event_groups_page_fetched",
            page=result.pagination.current,
            next_page=result.pagination.next,
            count=len(result.values),
        )
        return result

    def get_all_event_groups(
        self,
        date_from: date | str,
        date_to: date | str,
        per: int = DEFAULT_PER_PAGE,
        staff_ids: list[int] | None = None,
        location_ids: list[int] | None = None,
    ) -> list[EventGroup]:
        """Fetch every page of event groups, in page order.

        Walks pages from 1 until the API reports no next page. The token is
        checked before each page since a long run can outlast it.
        """
        event_groups: list[EventGroup] = []
        page = 1
        while True:
            result = self.get_event_groups(
                date_from,
                date_to,
                per=per,
                staff_ids=staff_ids,
                location_ids=location_ids,
                page=page,
            )
            event_groups.extend(result.values)
            if result.pagination.next is None:
                break
            page += 1

        logger.info(
            "event_groups_fetched",
            date_from=_date_param(date_from),
            date_to=_date_param(date_to),
            pages=page,
            count=len(event_groups),
        )
        return event_groups

    def get_customer_detail(self, customer_id: int) -> CustomerDetail:
        """Fetch the full customer record (phone numbers, demographics).

        Raises:
            UpstreamError: On a non-2xx response.
        """
        data = self._get(
            f"{self.store_url}/customers/{customer_id}", "Customer detail fetch failed"
        )
        return CustomerDetail.model_validate(data)
