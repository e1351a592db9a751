"""
Error taxonomy for the Renew Admin service layer.

Services raise these exceptions; the API routers translate them to HTTP
responses:

- ValidationError: missing/malformed path components or percentage (HTTP 400)
- StoreError: the underlying store failed or rejected a write (HTTP 500)
- DuplicateNameError: unique-name violation on a named entity (HTTP 400)
- AuthenticationError: bad credentials or token (HTTP 401/403)

Not-found conditions on update/delete are NOT exceptions: services return
None/False and the router decides the response.
"""

from typing import Any, Dict, Optional


class RenewAdminError(Exception):
    """Base exception carrying a message and optional structured context."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(RenewAdminError):
    """Raised when a request is missing path components or has a bad percentage."""


class StoreError(RenewAdminError):
    """Raised when the entry/override/brand store is unreachable or rejects a write."""


class DuplicateNameError(StoreError):
    """Raised when a named entity would violate its unique-name constraint."""


class AuthenticationError(RenewAdminError):
    """Raised when credentials or a session token cannot be verified."""


__all__ = [
    'RenewAdminError',
    'ValidationError',
    'StoreError',
    'DuplicateNameError',
    'AuthenticationError',
]
