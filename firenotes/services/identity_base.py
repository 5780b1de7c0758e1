"""
Firenotes — Abstract Identity Provider Interface
=================================================

What:  Contract for the third-party service that verifies credentials,
       issues sessions and sends password-reset emails.
Why:   IdentityGateway owns the application rules (minimum password length,
       error categories, profile document); the provider adapter only
       speaks the wire protocol. Tests swap the transport, not the gateway.
How:   Implementations return an AuthSession on success and raise
       IdentityProviderError(code, message) on any rejection or transport
       failure. The gateway converts those into AuthFailure values.
"""

from abc import ABC, abstractmethod

from firenotes.models.session import AuthSession


class IdentityProvider(ABC):
    """
    Implementations:
        - FirebaseIdentityProvider: Identity Toolkit REST API
    """

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthSession:
        """
        Create an account and return its first session.

        Raises:
            IdentityProviderError: e.g. EMAIL_EXISTS, INVALID_EMAIL, WEAK_PASSWORD
        """
        ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Raises:
            IdentityProviderError: e.g. INVALID_LOGIN_CREDENTIALS, USER_DISABLED
        """
        ...

    @abstractmethod
    async def send_password_reset(self, email: str) -> None:
        """
        Ask the provider to email a reset link (out-of-band flow).

        Raises:
            IdentityProviderError: e.g. EMAIL_NOT_FOUND, INVALID_EMAIL
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        ...
