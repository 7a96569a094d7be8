"""
Custom exceptions for relfinder.

Modified: 2026-10-19
"""


class RelFinderError(Exception):
    """Base exception for all relfinder errors."""

    pass


class AuthenticationError(RelFinderError):
    """Raised when GitHub authentication fails."""

    pass


class TokenExchangeError(AuthenticationError):
    """Raised when the token relay does not hand back a token for a code."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class StateStoreError(RelFinderError):
    """Raised when the persisted UI state cannot be written."""

    pass


class ConfigurationError(RelFinderError):
    """Raised when configuration is invalid or missing."""

    pass
