"""
Firenotes — Firebase Authentication Provider
=============================================

What:  IdentityProvider implementation over the Identity Toolkit REST API.
Why:   Email/password accounts are managed by Firebase Authentication, the
       same project the mobile clients sign into.
How:   POSTs to {base}/accounts:<method>?key=<web api key> with httpx.

Endpoints:
    accounts:signUp              {email, password, returnSecureToken}
    accounts:signInWithPassword  {email, password, returnSecureToken}
    accounts:sendOobCode         {requestType: PASSWORD_RESET, email}

Error payloads:
    {"error": {"code": 400, "message": "WEAK_PASSWORD : Password should be at least 6 characters"}}
    The code is the part before " : "; the remainder (if any) is detail text.

Retry policy:
    None. A failed call is reported once; the user decides whether to try again.
"""

import logging
from typing import Any, Dict

import httpx

from firenotes.exceptions import IdentityProviderError
from firenotes.models.session import AuthSession
from firenotes.services.identity_base import IdentityProvider

logger = logging.getLogger(__name__)

TRANSPORT_ERROR = "TRANSPORT_ERROR"
MALFORMED_RESPONSE = "MALFORMED_RESPONSE"


def parse_error_code(message: str) -> str:
    """'WEAK_PASSWORD : Password should be...' → 'WEAK_PASSWORD'"""
    return message.split(":", 1)[0].strip() or "UNKNOWN"


class FirebaseIdentityProvider(IdentityProvider):
    """
    Args:
        http_client: Shared httpx.AsyncClient (owned by the application).
        api_key: Firebase Web API key.
        base_url: Identity Toolkit root (overridable for the Auth emulator).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://identitytoolkit.googleapis.com/v1",
    ):
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self._base_url}/accounts:{method}"
        try:
            response = await self._http.post(url, params={"key": self._api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.warning("Identity provider unreachable during %s: %s", method, str(e))
            raise IdentityProviderError(
                code=TRANSPORT_ERROR,
                message="Could not reach the authentication service",
                context={"method": method, "error_type": type(e).__name__},
            ) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            raw = (body.get("error") or {}).get("message", "") if isinstance(body, dict) else ""
            code = parse_error_code(raw) if raw else f"HTTP_{response.status_code}"
            logger.info("Identity provider rejected %s: %s", method, code)
            raise IdentityProviderError(
                code=code,
                message=raw or code,
                context={"method": method, "status": response.status_code},
            )

        if not isinstance(body, dict):
            raise IdentityProviderError(code=MALFORMED_RESPONSE, context={"method": method})
        return body

    def _session(self, method: str, body: Dict[str, Any]) -> AuthSession:
        try:
            return AuthSession.from_provider_payload(body)
        except KeyError as e:
            raise IdentityProviderError(
                code=MALFORMED_RESPONSE,
                context={"method": method, "missing": str(e)},
            ) from e

    async def sign_up(self, email: str, password: str) -> AuthSession:
        body = await self._call(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._session("signUp", body)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        body = await self._call(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._session("signInWithPassword", body)

    async def send_password_reset(self, email: str) -> None:
        await self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    async def health_check(self) -> bool:
        """
        The Identity Toolkit has no ping endpoint; configuration plus a
        reachable host is the best available signal.
        """
        if not self._api_key:
            return False
        try:
            await self._http.get(self._base_url)
            return True
        except httpx.HTTPError as e:
            logger.warning("Identity provider health check failed: %s", str(e))
            return False
