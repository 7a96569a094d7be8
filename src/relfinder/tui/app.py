"""Main relfinder TUI application.

Coordinates authentication, the cascade controller and the UI components.

Modified: 2026-10-19
"""

import asyncio
import logging
import webbrowser
from pathlib import Path
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Header, Static

from ..config.settings import Settings
from ..core.cascade import (
    CommitRelease,
    CommitRepo,
    CommitUser,
    EditReleaseQuery,
    EditRepoQuery,
    EditUserQuery,
    FetchRequest,
)
from ..core.controller import CascadeController
from ..core.exceptions import AuthenticationError, TokenExchangeError
from ..core.github_client import GitHubAPIClient
from ..core.models import Level
from ..core.store import StateStore

from .messages import CandidateChosen, ErrorMessage, LoginSubmitted, QueryEdited, StateChanged
from .ui.cascade_view import CascadeView
from .ui.login_view import LoginView
from .ui.status_bar import StatusBar


logger = logging.getLogger(__name__)

_EDIT_EVENTS = {
    Level.USER: EditUserQuery,
    Level.REPO: EditRepoQuery,
    Level.RELEASE: EditReleaseQuery,
}

_COMMIT_EVENTS = {
    Level.USER: CommitUser,
    Level.REPO: CommitRepo,
    Level.RELEASE: CommitRelease,
}


class RelFinderApp(App):
    """Main application class for relfinder."""

    TITLE = "relfinder"
    SUB_TITLE = "GitHub Release Finder"

    CSS = """
    #main-container {
        height: 1fr;
    }

    #loading-message {
        width: 100%;
        height: 100%;
        content-align: center middle;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+o", "open_release", "Release page"),
        Binding("ctrl+l", "logout", "Logout"),
    ]

    def __init__(
        self,
        settings: Optional[Settings] = None,
        location: Optional[str] = None,
        config_path: Optional[Path] = None,
    ):
        """Initialize the application.

        Args:
            settings: Settings to use (loaded from disk when omitted)
            location: Redirect location the app was opened with, may carry ``?code=``
            config_path: Config file to load settings from
        """
        super().__init__()

        self.settings = settings or Settings.load(config_path)
        self.location = location

        # Core components (initialized in on_mount)
        self.store: Optional[StateStore] = None
        self.api_client: Optional[GitHubAPIClient] = None
        self.controller: Optional[CascadeController] = None

        # UI components
        self.cascade_view: Optional[CascadeView] = None
        self.login_view: Optional[LoginView] = None
        self.status_bar: Optional[StatusBar] = None

    def compose(self) -> ComposeResult:
        """Create the application layout."""
        yield Header()

        with Container(id="main-container"):
            yield Static("Initializing...", id="loading-message")

        yield StatusBar(id="status-bar")

    async def on_mount(self) -> None:
        """Initialize the application after mounting."""
        try:
            self.status_bar = self.query_one("#status-bar", StatusBar)

            self.store = StateStore(
                db_path=self.settings.storage.resolved_db_path(),
                key=self.settings.storage.state_key,
            )
            self.api_client = GitHubAPIClient(
                api_url=self.settings.github.api_url,
                page_size=self.settings.search.page_size,
                search_max_pages=self.settings.search.search_max_pages,
                rate_limit_buffer=self.settings.github.rate_limit_buffer,
                timeout=self.settings.github.request_timeout,
            )
            self.controller = CascadeController(
                self.settings,
                self.store,
                self.api_client,
                on_change=lambda state: self.post_message(StateChanged(state)),
            )

            try:
                self.location = await self.controller.start(self.location)
            except TokenExchangeError as e:
                self.notify(f"GitHub login failed: {e}", severity="error", timeout=10)

            await self.show_current_view()

        except Exception as e:
            logger.error(f"Error during initialization: {e}", exc_info=True)
            self.notify(f"Initialization error: {e}", severity="error")
            self.exit(1)

    async def on_unmount(self) -> None:
        if self.api_client:
            await self.api_client.aclose()

    async def show_current_view(self) -> None:
        """Mount the login view or the cascade view, whichever the session calls for."""
        container = self.query_one("#main-container")
        await container.remove_children()
        self.cascade_view = None
        self.login_view = None

        if not self.controller.session.is_authenticated:
            self.login_view = LoginView(self.controller.auth.authorize_url(), id="login-view")
            await container.mount(self.login_view)
            return

        self.cascade_view = CascadeView(id="cascade-view")
        await container.mount(self.cascade_view)

        state = self.controller.cascade
        self.cascade_view.render_state(state)
        self.cascade_view.focus_step(state)
        if self.status_bar:
            self.status_bar.update_context(state)

        self.run_worker(self._load_user_info(), group="user-info", exit_on_error=False)

    async def _load_user_info(self) -> None:
        """Show who is logged in (PyGithub is blocking, so run it in a thread)."""
        token = self.controller.session.auth_token
        try:
            info = await asyncio.to_thread(self.controller.auth.get_user_info, token)
        except AuthenticationError as e:
            logger.warning(f"Could not load user info: {e}")
            return
        if self.status_bar:
            self.status_bar.update_user(info["login"])

    def _start_fetch(self, request: FetchRequest) -> None:
        self.run_worker(
            self._fetch(request),
            group=f"fetch-{request.level.value}",
            description=f"{request.level.value} {request.key}",
        )

    async def _fetch(self, request: FetchRequest) -> None:
        try:
            await self.controller.run_fetch(request)
        except Exception as e:
            logger.error(f"Fetch for {request.level.value} failed: {e}", exc_info=True)
            self.post_message(ErrorMessage(f"Could not load {request.level.value} list", e))

    # Action handlers

    def action_open_release(self) -> None:
        """Open the committed release's page in the browser."""
        release = self.controller.cascade.selected_release if self.controller else None
        if release and release.html_url:
            webbrowser.open(release.html_url)
        else:
            self.notify("No release selected", timeout=2)

    async def action_logout(self) -> None:
        """Forget the token and return to the login view."""
        if not self.controller:
            return
        await self.controller.logout()
        if self.status_bar:
            self.status_bar.update_user("")
        await self.show_current_view()

    # Message handlers

    async def on_state_changed(self, message: StateChanged) -> None:
        """Re-render after each transition."""
        if self.cascade_view:
            self.cascade_view.render_state(message.state.cascade)

        if self.status_bar:
            self.status_bar.update_context(message.state.cascade)
            limiter = self.api_client.rate_limiter if self.api_client else None
            if limiter and limiter.last_check:
                self.status_bar.update_rate_limit(limiter)

    async def on_query_edited(self, message: QueryEdited) -> None:
        """Handle typing in one of the cascade fields."""
        try:
            request = await self.controller.dispatch(_EDIT_EVENTS[message.level](message.text))
            if request is not None:
                self._start_fetch(request)
        except Exception as e:
            logger.error(f"Error handling {message.level.value} query: {e}", exc_info=True)
            self.notify(f"Error: {e}", severity="error")

    async def on_candidate_chosen(self, message: CandidateChosen) -> None:
        """Handle a pick from one of the cascade dropdowns."""
        try:
            request = await self.controller.dispatch(
                _COMMIT_EVENTS[message.level](message.candidate)
            )
            if request is not None:
                self._start_fetch(request)
            if self.cascade_view:
                self.cascade_view.focus_step(self.controller.cascade)
        except Exception as e:
            logger.error(f"Error selecting {message.level.value}: {e}", exc_info=True)
            self.notify(f"Error: {e}", severity="error")

    async def on_login_submitted(self, message: LoginSubmitted) -> None:
        """Exchange the code from the pasted redirect URL."""
        try:
            self.location = await self.controller.login(message.location)
        except TokenExchangeError as e:
            if self.login_view:
                self.login_view.set_status(f"Login failed: {e}")
            self.notify(f"GitHub login failed: {e}", severity="error", timeout=10)
            return

        if self.controller.session.is_authenticated:
            await self.show_current_view()
        elif self.login_view:
            self.login_view.set_status("No authorization code found in that URL")

    async def on_error_message(self, message: ErrorMessage) -> None:
        """Handle error messages."""
        self.notify(message.message, severity="error", timeout=5)


async def run_app(
    settings: Optional[Settings] = None,
    location: Optional[str] = None,
    config_path: Optional[Path] = None,
) -> None:
    """Run the relfinder TUI application.

    Args:
        settings: Optional preloaded settings
        location: Redirect location carrying ``?code=`` after an OAuth login
        config_path: Optional config file path
    """
    app = RelFinderApp(settings=settings, location=location, config_path=config_path)
    await app.run_async()


if __name__ == "__main__":
    asyncio.run(run_app())
