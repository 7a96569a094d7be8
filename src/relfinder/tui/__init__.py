"""
TUI (Terminal User Interface) for relfinder.

Textual-based cascade of user, repository and release pickers.

Modified: 2026-10-19
"""

__all__ = ["app", "messages"]
