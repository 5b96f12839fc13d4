"""Exceptions raised by the API client, the session layer and form validation."""

from typing import Dict, Optional

class EventHubError(Exception):
    """Base exception for client-side errors."""
    pass

class AuthError(EventHubError):
    """Raised when credentials are rejected or the session has expired."""

    def __init__(self, message: str = "Authentication failed", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

class NetworkError(EventHubError):
    """Raised when the API is unreachable or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

class NotFoundError(NetworkError):
    """Raised when the API answers 404."""
    pass

class ValidationError(EventHubError):
    """
    Raised when user input fails client-side checks.

    Attributes:
        fields: Mapping of field name to a human readable problem
    """

    def __init__(self, fields: Dict[str, str]):
        self.fields = dict(fields)
        details = '; '.join(f"{name}: {problem}" for name, problem in self.fields.items())
        super().__init__(f"Invalid input - {details}")
