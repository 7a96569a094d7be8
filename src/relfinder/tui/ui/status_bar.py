"""Status bar widget for relfinder.

Shows the drill-down path, the logged-in user and rate limit usage.

Modified: 2026-10-19
"""

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Static
from textual.widget import Widget
from textual.reactive import reactive

from ...core.models import CascadeState
from ...utils.rate_limiter import RateLimiter


def format_context(state: CascadeState) -> str:
    """Path of committed selections, e.g. ``octocat / Hello-World / v1.0``."""
    parts = []
    if state.selected_user:
        parts.append(state.selected_user.login)
    if state.selected_repo:
        parts.append(state.selected_repo.name)
    if state.selected_release:
        parts.append(state.selected_release.display_name)
    return " / ".join(parts) if parts else "No selection"


class StatusBar(Widget):
    """Status bar showing context and rate limit information."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        background: $panel;
        color: $text;
        dock: bottom;
    }

    StatusBar > Horizontal {
        width: 100%;
        height: 1;
    }

    StatusBar .status-left {
        width: 2fr;
        padding: 0 1;
    }

    StatusBar .status-center {
        width: 1fr;
        text-align: center;
        padding: 0 1;
        color: $text-muted;
    }

    StatusBar .status-right {
        width: 1fr;
        text-align: right;
        padding: 0 1;
    }

    StatusBar .rate-limit-warning {
        color: $warning;
        text-style: bold;
    }

    StatusBar .rate-limit-critical {
        color: $error;
        text-style: bold;
    }
    """

    context = reactive("")
    user = reactive("")
    rate_limit = reactive("")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.left_widget: Optional[Static] = None
        self.center_widget: Optional[Static] = None
        self.right_widget: Optional[Static] = None

    def compose(self) -> ComposeResult:
        """Create status bar layout."""
        with Horizontal():
            self.left_widget = Static("", classes="status-left", markup=False)
            self.center_widget = Static("", classes="status-center", markup=False)
            self.right_widget = Static("", classes="status-right", markup=False)

            yield self.left_widget
            yield self.center_widget
            yield self.right_widget

    def update_context(self, state: CascadeState) -> None:
        """Update the drill-down path (left side)."""
        self.context = format_context(state)
        if self.left_widget:
            self.left_widget.update(self.context)

    def update_user(self, login: str) -> None:
        """Update the logged-in user (center)."""
        self.user = login
        if self.center_widget:
            self.center_widget.update(f"@{login}" if login else "")

    def update_rate_limit(self, limiter: RateLimiter) -> None:
        """Show the remaining quota, colored once it runs low (right side)."""
        self.rate_limit = limiter.format_remaining()
        if not self.right_widget:
            return

        critical = limiter.get_remaining() == 0
        self.right_widget.set_class(critical, "rate-limit-critical")
        self.right_widget.set_class(limiter.should_warn() and not critical, "rate-limit-warning")
        self.right_widget.update(f"Rate: {self.rate_limit}")
