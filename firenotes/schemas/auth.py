"""
Firenotes — Auth Screen Schemas
================================

What:  Request/response models of the Login, Sign-Up and Forgot-Password
       screens.
Why:   The UI renders a screen response directly: a transient notification
       (toast text) and the navigation state after the action.

Emptiness checks are NOT done here: the screens report "Please fill in all
fields" as a notification, which a 422 schema error could not do.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from firenotes.models.session import UserProfile
from firenotes.navigation import Destination, Navigator


class CredentialsRequest(BaseModel):
    """Body of POST /auth/login and POST /auth/signup."""

    email: str = Field(default="", description="Account email")
    password: str = Field(default="", description="Account password")


class ForgotPasswordRequest(BaseModel):
    email: str = Field(default="", description="Email that receives the reset link")


class UserResponse(BaseModel):
    """Public profile of the signed-in user."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserResponse":
        return cls(
            uid=profile.uid,
            email=profile.email,
            display_name=profile.display_name,
            photo_url=profile.photo_url,
        )


class NavigationState(BaseModel):
    """Visible screen and the back stack beneath it."""

    destination: Destination
    back_stack: List[Destination]

    @classmethod
    def from_navigator(cls, navigator: Navigator) -> "NavigationState":
        return cls(destination=navigator.current, back_stack=navigator.back_stack)


class ScreenResponse(BaseModel):
    """
    Outcome of an auth screen action.

    client_token is only set by login and sign-up; it must be sent as
    `Authorization: Bearer <token>` on every Home request.
    """

    notification: Optional[str] = Field(default=None, description="Transient message for the user")
    navigation: NavigationState
    client_token: Optional[str] = None
    user: Optional[UserResponse] = None
