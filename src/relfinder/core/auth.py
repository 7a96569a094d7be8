"""
GitHub OAuth web flow through a token exchange relay.

The authorize page redirects back to the app with ``?code=...``. The code is
swapped for a token by a small relay service (gatekeeper style) so the
client secret never ships with relfinder.

Modified: 2026-10-19
"""

import dataclasses
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

import httpx
import requests
from github import Auth, Github, GithubException

from relfinder.config.settings import GitHubSettings
from relfinder.core.exceptions import AuthenticationError, TokenExchangeError
from relfinder.core.github_client import GitHubAPIClient
from relfinder.core.models import AppState, AuthStatus, Session
from relfinder.core.store import StateStore

logger = logging.getLogger(__name__)


class GitHubAuth:
    """
    Drives the session from unauthenticated to authenticated.

    Every session change is written to the state store before the next
    step runs, so a crash mid-exchange is visible on the next start.
    """

    AUTHORIZE_URL = "https://github.com/login/oauth/authorize"

    def __init__(
        self,
        settings: GitHubSettings,
        store: StateStore,
        api_client: Optional[GitHubAPIClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the auth flow.

        Args:
            settings: GitHub settings (client id, scope, redirect, relay)
            store: Store the session is persisted through
            api_client: Client to arm with the token once known
            transport: Optional httpx transport for the relay call (tests)
        """
        self.settings = settings
        self.store = store
        self.api_client = api_client
        self._transport = transport

    # ==================== Location handling ====================

    def authorize_url(self) -> str:
        """Link to GitHub's authorize page for this OAuth app."""
        query = urlencode(
            {
                "client_id": self.settings.client_id,
                "scope": self.settings.scope,
                "redirect_uri": self.settings.redirect_uri,
            }
        )
        return f"{self.AUTHORIZE_URL}?{query}"

    @staticmethod
    def extract_code(location: Optional[str]) -> Optional[str]:
        """
        Pull the authorization code out of a redirect location.

        Args:
            location: URL GitHub redirected to, e.g. ``http://localhost:3000/?code=abc``

        Returns:
            The code, or None if the location carries none
        """
        if not location:
            return None
        values = parse_qs(urlsplit(location.strip()).query).get("code")
        if not values or not values[0]:
            return None
        return values[0]

    @staticmethod
    def strip_code(location: str) -> str:
        """Reduce a location to its bare origin (``scheme://host/``)."""
        parts = urlsplit(location.strip())
        return urlunsplit((parts.scheme, parts.netloc, "/", "", ""))

    # ==================== Exchange ====================

    async def exchange_code(self, code: str) -> str:
        """
        Swap an authorization code for a token through the relay.

        Args:
            code: Authorization code from the redirect

        Returns:
            GitHub access token

        Raises:
            TokenExchangeError: If the relay fails or answers without a token
        """
        url = f"{self.settings.relay_url.rstrip('/')}/authenticate/{code}"
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.request_timeout, transport=self._transport
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"Token relay unreachable: {e}")

        if response.status_code != 200:
            raise TokenExchangeError(
                f"Token relay returned status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            token = response.json().get("token")
        except (ValueError, AttributeError):
            raise TokenExchangeError("Token relay returned a malformed body", status_code=200)

        if not token:
            raise TokenExchangeError("Token relay response has no token", status_code=200)

        return token

    async def complete_login(self, state: AppState, code: str) -> AppState:
        """
        Run the exchange for ``code`` and persist each session change.

        Args:
            state: Current app state
            code: Authorization code

        Returns:
            State with an authenticated session

        Raises:
            TokenExchangeError: If the exchange fails; the session has been
                reset to unauthenticated and persisted before raising
        """
        state = await self._set_session(state, Session(auth_status=AuthStatus.EXCHANGING))

        try:
            token = await self.exchange_code(code)
        except TokenExchangeError as e:
            logger.error(f"Token exchange failed: {e}")
            await self._set_session(state, Session(auth_status=AuthStatus.UNAUTHENTICATED))
            raise

        state = await self._set_session(
            state, Session(auth_token=token, auth_status=AuthStatus.AUTHENTICATED)
        )
        self._arm(token)
        logger.info("GitHub authentication successful")
        return state

    async def startup(
        self, state: AppState, location: Optional[str] = None
    ) -> Tuple[AppState, Optional[str]]:
        """
        Settle the session when the app starts.

        Priority:
        1. Authorization code in ``location`` (exchanged, then stripped)
        2. Token already in the persisted session (re-armed, no exchange)
        3. Token from GITHUB_TOKEN / config file

        Args:
            state: State loaded from the store (or blank)
            location: Location the app was opened with

        Returns:
            (new state, location to continue at)

        Raises:
            TokenExchangeError: If a code was present and the exchange failed
        """
        code = self.extract_code(location)
        if code:
            state = await self.complete_login(state, code)
            return state, self.strip_code(location)

        session = state.session
        if session.auth_token:
            if session.auth_status is not AuthStatus.AUTHENTICATED:
                state = await self._set_session(
                    state,
                    Session(auth_token=session.auth_token, auth_status=AuthStatus.AUTHENTICATED),
                )
            self._arm(session.auth_token)
            logger.info("Re-armed stored GitHub token")
            return state, location

        if self.settings.token:
            state = await self._set_session(
                state,
                Session(auth_token=self.settings.token, auth_status=AuthStatus.AUTHENTICATED),
            )
            self._arm(self.settings.token)
            logger.info("Authenticated via configured token")
            return state, location

        if session.auth_status is AuthStatus.EXCHANGING:
            # An exchange from a previous run never finished
            state = await self._set_session(state, Session())

        return state, location

    async def revoke_credentials(self, state: AppState) -> AppState:
        """Forget the stored token."""
        state = await self._set_session(state, Session())
        logger.info("Credentials revoked")
        return state

    # ==================== User info ====================

    def get_user_info(self, token: str) -> Dict[str, Any]:
        """
        Get the authenticated user's profile (blocking, PyGithub).

        Args:
            token: GitHub access token

        Returns:
            Dictionary with user info (login, name, email, etc.)

        Raises:
            AuthenticationError: If the token is rejected or GitHub is unreachable
        """
        client = Github(auth=Auth.Token(token), base_url=self.settings.api_url)
        try:
            user = client.get_user()
            return {
                "login": user.login,
                "name": user.name,
                "email": user.email,
                "public_repos": user.public_repos,
                "followers": user.followers,
            }
        except GithubException as e:
            raise AuthenticationError(f"GitHub rejected the token: {e}")
        except requests.exceptions.RequestException as e:
            raise AuthenticationError(f"Could not reach GitHub: {e}")
        finally:
            client.close()

    # ==================== Internals ====================

    async def _set_session(self, state: AppState, session: Session) -> AppState:
        state = dataclasses.replace(state, session=session)
        await self.store.save(state)
        return state

    def _arm(self, token: str) -> None:
        if self.api_client is not None:
            self.api_client.set_token(token)
