"""
Firenotes — Two-Variant Result Types
=====================================

What:  Tagged success/failure values returned by the gateways.
Why:   Wrong passwords, duplicate accounts and unreachable stores are
       expected outcomes of every provider call. Callers branch on `ok`
       (or pattern-match the class) instead of wrapping calls in try/except.

    AuthResult  = AuthSuccess  | AuthFailure    (identity gateway)
    StoreResult = StoreOk      | StoreFailure   (record gateway mutations)
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from firenotes.exceptions import AuthErrorKind
from firenotes.models.session import AuthSession

T = TypeVar("T")


@dataclass(frozen=True)
class AuthSuccess:
    """Authenticated session handle, plus a non-fatal warning if any."""

    session: AuthSession
    warning: Optional[str] = None

    ok = True


@dataclass(frozen=True)
class AuthFailure:
    """Human-readable reason the identity operation failed."""

    kind: AuthErrorKind
    message: str

    ok = False


AuthResult = Union[AuthSuccess, AuthFailure]


@dataclass(frozen=True)
class StoreOk(Generic[T]):
    value: T

    ok = True


@dataclass(frozen=True)
class StoreFailure:
    """Raw provider message of a failed store operation."""

    message: str

    ok = False


StoreResult = Union[StoreOk[T], StoreFailure]


@dataclass(frozen=True)
class ResetRequested:
    """Password reset email accepted by the provider."""

    email: str

    ok = True


ResetResult = Union[ResetRequested, AuthFailure]
