"""
Cascade controller.

Owns the one AppState, feeds events through the cascade reducer, persists
after every transition and runs the fetches the reducer asks for.

Modified: 2026-10-19
"""

import dataclasses
import logging
from typing import Any, Callable, Dict, List, Optional

from relfinder.config.settings import Settings
from relfinder.core import cascade
from relfinder.core.auth import GitHubAuth
from relfinder.core.cascade import Event, FetchFinished, FetchRequest, PageLoaded
from relfinder.core.exceptions import TokenExchangeError
from relfinder.core.github_client import GitHubAPIClient
from relfinder.core.models import (
    AppState,
    CascadeState,
    Level,
    ReleaseCandidate,
    RepoCandidate,
    Session,
    UserCandidate,
)
from relfinder.core.store import StateStore

logger = logging.getLogger(__name__)

_CANDIDATE_TYPES = {
    Level.USER: UserCandidate,
    Level.REPO: RepoCandidate,
    Level.RELEASE: ReleaseCandidate,
}


class CascadeController:
    """Single writer of the application state."""

    def __init__(
        self,
        settings: Settings,
        store: StateStore,
        api_client: GitHubAPIClient,
        auth: Optional[GitHubAuth] = None,
        on_change: Optional[Callable[[AppState], None]] = None,
    ):
        """
        Initialize the controller.

        Args:
            settings: Application settings
            store: Where the state is persisted after each transition
            api_client: Paginated GitHub client
            auth: Auth flow (built from settings when omitted)
            on_change: Called with the new state after each transition
        """
        self.settings = settings
        self.store = store
        self.api_client = api_client
        self.auth = auth or GitHubAuth(settings.github, store, api_client=api_client)
        self.on_change = on_change
        self.state = AppState.blank()
        # Newest planned fetch per level; older chains for a level stop early
        self._latest: Dict[Level, FetchRequest] = {}

    @property
    def cascade(self) -> CascadeState:
        return self.state.cascade

    @property
    def session(self) -> Session:
        return self.state.session

    # ==================== Startup & login ====================

    async def start(self, location: Optional[str] = None) -> Optional[str]:
        """
        Load persisted state and settle authentication.

        Args:
            location: Location the app was opened with (may carry ``?code=``)

        Returns:
            Location to continue at (code stripped after an exchange)

        Raises:
            TokenExchangeError: If a code was present and could not be exchanged
        """
        await self.store.initialize()
        state = await self.store.load_or_blank()
        # No fetch survives a restart, so no level can still be loading
        self.state = dataclasses.replace(
            state,
            cascade=dataclasses.replace(
                state.cascade,
                loading_user=False,
                loading_repo=False,
                loading_release=False,
            ),
        )
        self._notify()
        return await self._authenticate(location)

    async def login(self, location: str) -> Optional[str]:
        """Complete a login from the location GitHub redirected to."""
        return await self._authenticate(location)

    async def logout(self) -> None:
        self.state = await self.auth.revoke_credentials(self.state)
        self._notify()

    async def _authenticate(self, location: Optional[str]) -> Optional[str]:
        try:
            self.state, location = await self.auth.startup(self.state, location)
        except TokenExchangeError:
            # GitHubAuth already persisted the reset session
            self.state = dataclasses.replace(self.state, session=Session())
            self._notify()
            raise
        self._notify()
        return location

    # ==================== Events ====================

    async def dispatch(self, event: Event) -> Optional[FetchRequest]:
        """
        Apply one event and persist the result.

        Args:
            event: Cascade event

        Returns:
            The fetch the event calls for, not yet started
        """
        search = self.settings.search
        new_cascade, request = cascade.transition(
            self.state.cascade,
            event,
            min_user_query_length=search.min_user_query_length,
            discard_stale=search.discard_stale_responses,
        )

        if new_cascade is not self.state.cascade:
            self.state = dataclasses.replace(self.state, cascade=new_cascade)
            await self.store.save(self.state)
            self._notify()

        if request is not None:
            self._latest[request.level] = request
        return request

    async def run_fetch(self, request: FetchRequest) -> int:
        """
        Run a planned fetch to completion, feeding each page back in.

        When stale responses are discarded, a fetch that has been replaced
        by a newer one for the same level stops at its next page and leaves
        the loading flag to its replacement.

        Args:
            request: Fetch planned by the reducer

        Returns:
            Number of pages received
        """
        if self._is_superseded(request):
            logger.debug(f"Skipping superseded {request.level.value} fetch {request.key!r}")
            return 0

        query = self.api_client.query_for(request)
        pages = 0
        superseded = False
        try:
            async for page in self.api_client.iter_pages(query):
                if self._is_superseded(request):
                    superseded = True
                    break
                pages += 1
                await self.dispatch(
                    PageLoaded(
                        level=request.level,
                        page=page.number,
                        items=tuple(self._to_candidates(request.level, page.items)),
                        key=request.key,
                    )
                )
        finally:
            if not superseded:
                await self.dispatch(FetchFinished(level=request.level, key=request.key))

        logger.info(f"Fetched {pages} page(s) for {request.level.value} {request.key!r}")
        return pages

    async def handle(self, event: Event) -> None:
        """Dispatch ``event`` and run whatever fetch it triggers."""
        request = await self.dispatch(event)
        if request is not None:
            await self.run_fetch(request)

    # ==================== Internals ====================

    @staticmethod
    def _to_candidates(level: Level, items: List[Dict[str, Any]]) -> List[Any]:
        candidate_type = _CANDIDATE_TYPES[level]
        candidates = []
        for item in items:
            try:
                candidates.append(candidate_type.from_github_response(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed {level.value} item: {e}")
        return candidates

    def _is_superseded(self, request: FetchRequest) -> bool:
        if not self.settings.search.discard_stale_responses:
            return False
        return self._latest.get(request.level, request) is not request

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.state)
