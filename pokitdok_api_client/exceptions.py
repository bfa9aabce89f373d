"""
Custom exception types for the PokitDok API client.

These exceptions allow callers to distinguish between failures
occurring during authentication, failures of the transport itself
and responses the client could not make sense of.
"""

from typing import Any, Optional


class PokitDokError(Exception):
    """Base exception for all PokitDok client errors."""


class PokitDokAuthError(PokitDokError):
    """Raised when the token endpoint rejects the client credentials."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PokitDokUnauthorizedError(PokitDokError):
    """Raised when a request is still rejected with 401 after a token refresh."""

    def __init__(self, message: str, status_code: int = 401, body: Any = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.url = url


class PokitDokParseError(PokitDokError):
    """Raised when a response body is not valid JSON."""

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message)
        self.body = body


class PokitDokConnectionError(PokitDokError, OSError):
    """Raised when the API cannot be reached (DNS, refused connection, timeout)."""


class PokitDokURLError(PokitDokError):
    """Raised when a request URL cannot be built from the given parameters."""
