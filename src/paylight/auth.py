"""Bearer token management for the Paylight X API.

Paylight has no client-credentials grant for store data, so TokenManager drives
the same Keycloak authorization-code login the clinic web client uses:
fetch the login page, post the credentials, exchange the redirect code.
The token lives in memory only and is replaced wholesale on every login.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import requests

from src.paylight.errors import AuthenticationError
from src.paylight.logging import get_logger
from src.paylight.models import Credentials, SessionToken, TokenResponse
from src.paylight.utils import (
    cookie_header,
    parse_authorization_code,
    parse_login_action,
)

logger = get_logger(__name__)

AUTH_BASE_URL = "https://auth.pay-light.com/realms/business-account"
AUTHORIZE_URL = f"{AUTH_BASE_URL}/protocol/openid-connect/auth"
TOKEN_URL = f"{AUTH_BASE_URL}/protocol/openid-connect/token"
CLIENT_ID = "glenfiddich-front"
REDIRECT_URI = "https://clinic.pay-light.com/"

# A token this close to expiry is treated as expired
EXPIRY_MARGIN = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenManager:
    """Owns the Paylight bearer token and re-authenticates when it goes stale.

    One instance per set of credentials; hand it to every component that makes
    authenticated calls.
    """

    def __init__(
        self,
        credentials: Credentials,
        http: requests.Session | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize TokenManager.

        Args:
            credentials: Paylight login ID, password and store ID.
            http: Session used for the login requests (new one if omitted).
            now: Clock returning an aware UTC datetime.
        """
        self._credentials = credentials
        self._http = http or requests.Session()
        self._now = now
        self._token: SessionToken | None = None

    @property
    def store_id(self) -> int:
        return self._credentials.store_id

    @property
    def token(self) -> SessionToken | None:
        return self._token

    def is_valid(self) -> bool:
        """Check whether a token is held and not within the expiry margin."""
        if self._token is None:
            return False
        return self._now() < self._token.expires_at - EXPIRY_MARGIN

    def invalidate(self) -> None:
        """Drop the held token so the next request logs in again.

        Called by the API client when Paylight rejects the bearer (401).
        """
        self._token = None
        logger.debug("token_invalidated")

    def get_valid_token(self) -> str:
        """Return a usable bearer value, logging in at most once if needed.

        Raises:
            AuthenticationError: If login fails or yields no token.
            ProtocolError: If the login page structure is not recognized.
        """
        if not self.is_valid():
            logger.debug("token_refresh_required", had_token=self._token is not None)
            self.authenticate()
        if self._token is None:
            raise AuthenticationError("Access token could not be obtained")
        return self._token.access_token

    def authenticate(self) -> SessionToken:
        """Run the three-step login and store the resulting token.

        Returns:
            The freshly issued token.

        Raises:
            ProtocolError: If the login form or authorization code is missing.
            AuthenticationError: If credentials are rejected or the token
                exchange fails.
        """
        # A failed login leaves the manager unauthenticated
        self._token = None
        logger.info("authentication_started", username=self._credentials.username)

        action_url, cookies = self._open_login_form()
        code = self._submit_credentials(action_url, cookies)
        token = self._exchange_code(code)

        self._token = token
        logger.info("authentication_succeeded", expires_at=token.expires_at.isoformat())
        return token

    def _open_login_form(self) -> tuple[str, str]:
        """Step 1: load the authorization page for its form action and cookies."""
        response = self._http.get(
            AUTHORIZE_URL,
            params={
                "client_id": CLIENT_ID,
                "redirect_uri": REDIRECT_URI,
                "response_type": "code",
                "scope": "openid",
            },
            allow_redirects=False,
        )
        action_url = parse_login_action(response.text)
        logger.debug("login_form_loaded", status=response.status_code)
        return action_url, cookie_header(response)

    def _submit_credentials(self, action_url: str, cookies: str) -> str:
        """Step 2: post username/password and read the code from the redirect."""
        response = self._http.post(
            action_url,
            data={
                "username": self._credentials.username,
                "password": self._credentials.password,
            },
            headers={"Cookie": cookies},
            allow_redirects=False,
        )
        location = response.headers.get("Location")
        if not location:
            raise AuthenticationError(
                "Login did not redirect - check credentials or login page changes",
                status_code=response.status_code,
            )
        return parse_authorization_code(location)

    def _exchange_code(self, code: str) -> SessionToken:
        """Step 3: trade the authorization code for a bearer token."""
        issued_at = self._now()
        response = self._http.post(
            TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "client_id": CLIENT_ID,
                "code": code,
                "redirect_uri": REDIRECT_URI,
            },
        )
        if not response.ok:
            raise AuthenticationError(
                f"Token exchange failed: {response.status_code}",
                status_code=response.status_code,
            )

        payload = TokenResponse.model_validate(response.json())
        return SessionToken(
            access_token=payload.access_token,
            expires_at=issued_at + timedelta(seconds=payload.expires_in),
        )
