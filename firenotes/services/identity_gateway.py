"""
Firenotes — Identity Gateway
=============================

What:  Uniform wrapper over the identity provider: sign-up, sign-in,
       sign-out, password reset and the current user's profile.
Why:   Screens need one result shape for every auth call and a small set
       of user-facing failure categories, not provider error codes.
How:   Every async operation returns AuthSuccess or AuthFailure; provider
       exceptions are caught here and never reach the caller.
Who:   One gateway per client context. It holds that client's current
       session, which the record store's Firestore adapter reads as its
       bearer credential.

Sign-up rules:
    1. Password shorter than min_password_length → INVALID_CREDENTIAL,
       provider not contacted, no session created
    2. Provider codes map to categories:
           EMAIL_EXISTS  → DUPLICATE_EMAIL
           INVALID_EMAIL → MALFORMED_EMAIL
           WEAK_PASSWORD → WEAK_PASSWORD
           anything else → PROVIDER
    3. On success, a profile document {email, notes: [], products: []} is
       written to the users collection under the new uid. If that write
       fails the identity is kept and the failure is returned as a warning.
"""

import logging
from typing import Dict, Optional

from firenotes.exceptions import AuthErrorKind, IdentityProviderError, StoreError
from firenotes.models.session import AuthSession, UserProfile
from firenotes.results import AuthFailure, AuthResult, AuthSuccess, ResetRequested, ResetResult
from firenotes.services.document_store import DocumentStore
from firenotes.services.identity_base import IdentityProvider

logger = logging.getLogger(__name__)

# ── Provider code → user-facing category ─────────────────────────────────
SIGN_UP_ERROR_KINDS: Dict[str, AuthErrorKind] = {
    "EMAIL_EXISTS": AuthErrorKind.DUPLICATE_EMAIL,
    "INVALID_EMAIL": AuthErrorKind.MALFORMED_EMAIL,
    "MISSING_EMAIL": AuthErrorKind.MALFORMED_EMAIL,
    "WEAK_PASSWORD": AuthErrorKind.WEAK_PASSWORD,
}

ERROR_MESSAGES: Dict[str, str] = {
    "EMAIL_EXISTS": "An account with this email already exists",
    "INVALID_EMAIL": "The email address is badly formatted",
    "MISSING_EMAIL": "The email address is badly formatted",
    "WEAK_PASSWORD": "The password is too weak",
    "EMAIL_NOT_FOUND": "No account exists for this email",
    "INVALID_PASSWORD": "Incorrect email or password",
    "INVALID_LOGIN_CREDENTIALS": "Incorrect email or password",
    "USER_DISABLED": "This account has been disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts, try again later",
    "TRANSPORT_ERROR": "Could not reach the authentication service",
}
GENERIC_MESSAGE = "Authentication failed"


def _failure(error: IdentityProviderError, kinds: Dict[str, AuthErrorKind]) -> AuthFailure:
    return AuthFailure(
        kind=kinds.get(error.code, AuthErrorKind.PROVIDER),
        message=ERROR_MESSAGES.get(error.code, GENERIC_MESSAGE),
    )


class IdentityGateway:
    """
    Args:
        provider: Identity provider adapter.
        profile_store: Document store that receives the sign-up profile
            document. None skips the profile write.
        users_collection: Collection holding profile documents.
        min_password_length: Client-side sign-up minimum.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        profile_store: Optional[DocumentStore] = None,
        users_collection: str = "users",
        min_password_length: int = 6,
    ):
        self._provider = provider
        self._profile_store = profile_store
        self._users_collection = users_collection
        self._min_password_length = min_password_length
        self._session: Optional[AuthSession] = None

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    def id_token(self) -> Optional[str]:
        """Bearer credential for the document store, None when signed out."""
        return self._session.id_token if self._session else None

    def attach_profile_store(self, store: DocumentStore) -> None:
        """The store usually needs this gateway's token, so it is wired after construction."""
        self._profile_store = store

    # ── Operations ────────────────────────────────────────────────────────

    async def sign_up(self, email: str, password: str) -> AuthResult:
        if len(password) < self._min_password_length:
            logger.info("Sign-up rejected client-side: password below minimum length")
            return AuthFailure(
                kind=AuthErrorKind.INVALID_CREDENTIAL,
                message=(
                    f"The password must be at least {self._min_password_length} characters"
                ),
            )

        try:
            session = await self._provider.sign_up(email, password)
        except IdentityProviderError as e:
            logger.warning("Sign-up failed: %s", e.code)
            return _failure(e, SIGN_UP_ERROR_KINDS)

        self._session = session
        logger.info("Account created for uid=%s", session.uid)

        warning = await self._create_profile(session)
        return AuthSuccess(session=session, warning=warning)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            session = await self._provider.sign_in(email, password)
        except IdentityProviderError as e:
            logger.warning("Sign-in failed: %s", e.code)
            return _failure(e, {})

        self._session = session
        logger.info("Signed in uid=%s", session.uid)
        return AuthSuccess(session=session)

    def sign_out(self) -> None:
        if self._session is not None:
            logger.info("Signed out uid=%s", self._session.uid)
        self._session = None

    async def reset_password(self, email: str) -> ResetResult:
        try:
            await self._provider.send_password_reset(email)
        except IdentityProviderError as e:
            logger.warning("Password reset failed: %s", e.code)
            return _failure(e, SIGN_UP_ERROR_KINDS)
        return ResetRequested(email=email)

    def get_current_user(self) -> Optional[UserProfile]:
        if self._session is None:
            return None
        return self._session.profile

    # ── Internals ─────────────────────────────────────────────────────────

    async def _create_profile(self, session: AuthSession) -> Optional[str]:
        if self._profile_store is None:
            return None
        document = {"email": session.email or "", "notes": [], "products": []}
        try:
            await self._profile_store.set(self._users_collection, session.uid, document)
        except StoreError as e:
            logger.error(
                "Profile document for uid=%s was not created: %s", session.uid, e.message
            )
            return f"Your account was created but the profile could not be saved: {e.message}"
        return None
