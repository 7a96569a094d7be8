"""
UI components for relfinder TUI.

Modified: 2026-10-19
"""

__all__ = [
    "cascade_view",
    "login_view",
    "status_bar",
]
