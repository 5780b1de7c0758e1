"""
Firenotes — Custom Exception Hierarchy
=======================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Targeted error handling with appropriate HTTP status codes and
       user-facing messages that never leak provider internals.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses.

Exception Hierarchy:
    FirenotesError (base)
    ├── ValidationError          → 400 Bad Request (empty form fields)
    ├── AuthError                → 400 / 401 / 409 (shown as a notification)
    ├── NotAuthenticatedError    → 401 Unauthorized (no live client session)
    ├── IdentityProviderError    → internal; converted to AuthFailure by the gateway
    ├── StoreError               → internal; logged by the record gateway
    └── RateLimitExceededError   → 429 Too Many Requests

Expected provider failures do NOT travel as exceptions through the gateways:
the identity gateway returns AuthFailure and the record gateway returns
StoreFailure (see firenotes.results). Exceptions are raised at the two
edges: by provider adapters (caught inside the gateways) and by the screen
routes (caught by the global handlers).
"""

from enum import Enum
from typing import Any, Dict, Optional


class FirenotesError(Exception):
    """
    Base exception for all Firenotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(FirenotesError):
    """
    Raised when form input is missing or unusable.

    When:    Empty email/password on login or sign-up, empty email on password
             reset.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthErrorKind(str, Enum):
    """User-facing categories for identity failures."""

    INVALID_CREDENTIAL = "invalid_credential"  # rejected client-side
    DUPLICATE_EMAIL = "duplicate_email"
    MALFORMED_EMAIL = "malformed_email"
    WEAK_PASSWORD = "weak_password"
    PROVIDER = "provider_error"  # anything else the provider reports


class AuthError(FirenotesError):
    """
    Raised by the screen layer when the identity gateway returned a failure.

    HTTP:
        INVALID_CREDENTIAL, MALFORMED_EMAIL, WEAK_PASSWORD → 400
        DUPLICATE_EMAIL                                     → 409
        PROVIDER                                            → 401
    """

    STATUS_CODES = {
        AuthErrorKind.INVALID_CREDENTIAL: 400,
        AuthErrorKind.MALFORMED_EMAIL: 400,
        AuthErrorKind.WEAK_PASSWORD: 400,
        AuthErrorKind.DUPLICATE_EMAIL: 409,
        AuthErrorKind.PROVIDER: 401,
    }

    def __init__(
        self,
        kind: AuthErrorKind = AuthErrorKind.PROVIDER,
        message: str = "Authentication failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["kind"] = kind.value
        super().__init__(message=message, context=ctx)
        self.kind = kind

    @property
    def status_code(self) -> int:
        return self.STATUS_CODES.get(self.kind, 401)


class NotAuthenticatedError(FirenotesError):
    """
    Raised when a Home request carries no token, or a token whose client
    context was dropped by sign-out.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "You need to sign in to continue",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IdentityProviderError(FirenotesError):
    """
    Raised by the identity provider adapter when the provider rejects a
    request or cannot be reached.

    Attributes:
        code: Provider error code (e.g. EMAIL_EXISTS, INVALID_LOGIN_CREDENTIALS),
              or TRANSPORT_ERROR when the request never got an answer.
    """

    def __init__(
        self,
        code: str,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["code"] = code
        super().__init__(message=message or code, context=ctx)
        self.code = code


class StoreError(FirenotesError):
    """
    Raised by document store adapters when a read or write fails.

    The message is always the provider's raw message; it is never classified
    further. The record gateway logs it and turns it into a StoreFailure.
    """

    def __init__(
        self,
        message: str = "Document store operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(FirenotesError):
    """
    Raised when a client exceeds the per-IP limit on credential endpoints.

    HTTP:    429 Too Many Requests
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many attempts. Please wait {retry_after} seconds before trying again."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
