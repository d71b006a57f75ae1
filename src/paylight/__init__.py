"""Paylight X → SmartCall RPA reservation export.

Logs in to Paylight X, pulls appointment event groups for a date range, and
converts them into SmartCall reservation operations.
"""

from src.paylight.auth import TokenManager
from src.paylight.client import PaylightClient
from src.paylight.converter import (
    CustomerDirectory,
    convert_event_group,
    convert_event_groups,
    to_json,
)
from src.paylight.errors import (
    AuthenticationError,
    PaylightError,
    ProtocolError,
    UpstreamError,
)
from src.paylight.models import Credentials, EventGroup, Reservation

__all__ = [
    "TokenManager",
    "PaylightClient",
    "CustomerDirectory",
    "convert_event_group",
    "convert_event_groups",
    "to_json",
    "PaylightError",
    "ProtocolError",
    "AuthenticationError",
    "UpstreamError",
    "Credentials",
    "EventGroup",
    "Reservation",
]
