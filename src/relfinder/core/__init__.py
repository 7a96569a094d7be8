"""
Core logic for relfinder.

Everything here is interface-agnostic: the cascade reducer, the paginated
GitHub fetcher, the auth flow and the state store are driven by the TUI
but importable and testable without it.

Modified: 2026-10-19
"""

from relfinder.core.exceptions import (
    RelFinderError,
    AuthenticationError,
    TokenExchangeError,
    StateStoreError,
    ConfigurationError,
)

__all__ = [
    "RelFinderError",
    "AuthenticationError",
    "TokenExchangeError",
    "StateStoreError",
    "ConfigurationError",
]
