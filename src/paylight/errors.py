"""Error hierarchy for the Paylight export pipeline.

Every failure surfaces to the caller; nothing here is retried. The CLI is the
only layer that catches these, logs them, and exits non-zero.

Example:
    try:
        reservations = convert_event_groups(client.get_all_event_groups(...))
    except AuthenticationError as e:
        log.error("login_rejected", status=e.status_code)
        raise
"""


class PaylightError(Exception):
    """Base exception for all Paylight integration errors."""

    pass


class ProtocolError(PaylightError):
    """Expected HTML or redirect structure is missing from a login response.

    Usually means the Paylight login page changed shape. Not fixable by retry.
    """

    pass


class AuthenticationError(PaylightError):
    """Credentials rejected or the token endpoint refused the exchange.

    Carries the HTTP status of the failing response when one is available.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamError(PaylightError):
    """Non-2xx response from a Paylight data endpoint."""

    def __init__(self, message: str, status_code: int, reason: str = "") -> None:
        super().__init__(f"{message}: {status_code} {reason}".rstrip())
        self.status_code = status_code
        self.reason = reason


class ConfigurationError(PaylightError):
    """Required settings are missing or malformed."""

    pass
