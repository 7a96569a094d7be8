"""Login view for relfinder.

Shows the GitHub authorize link and takes the URL GitHub redirected back to.

Modified: 2026-10-19
"""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Input, Static

from ..messages import LoginSubmitted


class LoginView(Vertical):
    """Authorize link plus a field for the redirected URL."""

    DEFAULT_CSS = """
    LoginView {
        width: 100%;
        height: 100%;
        padding: 2 4;
    }

    LoginView > .login-title {
        text-style: bold;
        margin-bottom: 1;
    }

    LoginView > .login-status {
        color: $text-muted;
        margin-top: 1;
    }
    """

    def __init__(self, authorize_url: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.authorize_url = authorize_url

    def compose(self) -> ComposeResult:
        yield Static("GitHub login required", classes="login-title")
        yield Static(f"1. Open [link={self.authorize_url}]{self.authorize_url}[/link]")
        yield Static("2. Authorize the app, then paste the URL you were sent back to:")
        yield Input(placeholder="http://localhost:3000/?code=...", id="callback-input")
        yield Static("", classes="login-status", id="login-status")

    def on_mount(self) -> None:
        self.query_one("#callback-input", Input).focus()

    def set_status(self, text: str) -> None:
        self.query_one("#login-status", Static).update(text)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        location = event.value.strip()
        if location:
            self.set_status("Exchanging code...")
            self.post_message(LoginSubmitted(location))
