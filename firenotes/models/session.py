"""
Firenotes — Session Handle
===========================

What:  The authenticated-session value produced by a successful sign-in or
       sign-up, and the public profile derived from it.
Who:   Created by the identity provider adapter, held by IdentityGateway,
       and handed to the Firestore adapter as its bearer credential.

The ID token is opaque to the application. Token refresh belongs to the
identity provider; an expired session simply stops being accepted by the
document store.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class UserProfile:
    """Public profile of the signed-in user (what the Home screen shows)."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class AuthSession:
    uid: str
    id_token: str = field(repr=False)
    refresh_token: str = field(default="", repr=False)
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_provider_payload(cls, payload: dict) -> "AuthSession":
        """
        Build a session from an Identity Toolkit sign-in/sign-up response.

        expiresIn is a string of seconds ("3600"); missing or malformed
        values leave expires_at unset.
        """
        expires_at = None
        try:
            expires_in = int(payload.get("expiresIn", ""))
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        except (TypeError, ValueError):
            pass

        return cls(
            uid=payload["localId"],
            id_token=payload["idToken"],
            refresh_token=payload.get("refreshToken", ""),
            email=payload.get("email") or None,
            display_name=payload.get("displayName") or None,
            photo_url=payload.get("profilePicture") or payload.get("photoUrl") or None,
            expires_at=expires_at,
        )

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at

    @property
    def profile(self) -> UserProfile:
        return UserProfile(
            uid=self.uid,
            email=self.email,
            display_name=self.display_name,
            photo_url=self.photo_url,
        )
