"""Custom Textual messages for relfinder.

Defines custom messages for communication between TUI components.

Modified: 2026-10-19
"""

from typing import Any, Optional

from textual.message import Message

from ..core.models import AppState, Level


class StateChanged(Message):
    """Message sent after every state transition."""

    def __init__(self, state: AppState):
        super().__init__()
        self.state = state


class QueryEdited(Message):
    """Message sent when the text of a cascade field changes."""

    def __init__(self, level: Level, text: str):
        super().__init__()
        self.level = level
        self.text = text


class CandidateChosen(Message):
    """Message sent when a candidate is picked from a cascade dropdown."""

    def __init__(self, level: Level, candidate: Any):
        super().__init__()
        self.level = level
        self.candidate = candidate


class LoginSubmitted(Message):
    """Message sent when the redirected URL is entered on the login view."""

    def __init__(self, location: str):
        super().__init__()
        self.location = location


class ErrorMessage(Message):
    """Message sent to display an error message."""

    def __init__(self, message: str, error: Optional[Exception] = None):
        super().__init__()
        self.message = message
        self.error = error
