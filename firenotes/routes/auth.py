"""
Firenotes — Auth Screen Routes
===============================

What:  Login, Sign-Up, Forgot-Password and Logout actions.
Why:   Each screen action returns the notification to show and where the UI
       lands afterwards; sign-in and sign-up also hand out the client token
       that identifies the new ClientContext.
How:   Empty form fields are rejected here with ValidationError; gateway
       failures become AuthError, which the global handler renders with the
       provider-independent message.

Flows:
    POST /auth/login            Login ──▶ Home (Login popped)
    POST /auth/signup           Sign-Up ──▶ Home (Login popped)
    POST /auth/forgot-password  Forgot-Password ──▶ Login (old Login popped)
    POST /auth/logout           Home ──▶ Login (Home popped)
"""

import logging

from fastapi import APIRouter, Depends

from firenotes.deps import get_client_token, get_services
from firenotes.exceptions import AuthError, ValidationError
from firenotes.navigation import Destination, Navigator
from firenotes.results import AuthFailure
from firenotes.schemas.auth import (
    CredentialsRequest,
    ForgotPasswordRequest,
    NavigationState,
    ScreenResponse,
    UserResponse,
)
from firenotes.schemas.common import ErrorResponse
from firenotes.services.container import AppServices
from firenotes.services.sessions import ClientContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

EMPTY_FIELDS_MESSAGE = "Please fill in all fields"

_ERROR_RESPONSES = {
    400: {"description": "Missing or invalid input", "model": ErrorResponse},
    401: {"description": "Rejected by the identity provider", "model": ErrorResponse},
    429: {"description": "Too many auth attempts", "model": ErrorResponse},
}


def _require_fields(**fields: str) -> None:
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        raise ValidationError(message=EMPTY_FIELDS_MESSAGE, context={"missing": missing})


def _signed_in_response(
    services: AppServices, context: ClientContext, notification: str
) -> ScreenResponse:
    context.navigator.navigate(Destination.HOME, pop_up_to=Destination.LOGIN, inclusive=True)
    token = services.registry.register(context)
    profile = context.identity.get_current_user()
    return ScreenResponse(
        notification=notification,
        navigation=NavigationState.from_navigator(context.navigator),
        client_token=token,
        user=UserResponse.from_profile(profile) if profile else None,
    )


@router.post(
    "/login",
    response_model=ScreenResponse,
    responses=_ERROR_RESPONSES,
    summary="Sign in with email and password",
)
async def login(
    body: CredentialsRequest,
    services: AppServices = Depends(get_services),
) -> ScreenResponse:
    _require_fields(email=body.email, password=body.password)

    context = services.new_client(stack=[Destination.LOGIN])
    result = await context.identity.sign_in(body.email.strip(), body.password)
    if isinstance(result, AuthFailure):
        context.close()
        raise AuthError(kind=result.kind, message=result.message)

    response = _signed_in_response(services, context, notification="Signed in")
    await context.controller.load_data()
    return response


@router.post(
    "/signup",
    response_model=ScreenResponse,
    responses={
        **_ERROR_RESPONSES,
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create an account",
    description=(
        "Creates the identity and its profile document in the users collection. "
        "If only the profile write fails, the account is kept and the reason is "
        "appended to the notification."
    ),
)
async def signup(
    body: CredentialsRequest,
    services: AppServices = Depends(get_services),
) -> ScreenResponse:
    _require_fields(email=body.email, password=body.password)

    context = services.new_client(stack=[Destination.LOGIN, Destination.SIGN_UP])
    result = await context.identity.sign_up(body.email.strip(), body.password)
    if isinstance(result, AuthFailure):
        context.close()
        raise AuthError(
            kind=result.kind,
            message=f"Could not create user: {result.message}",
        )

    notification = "User created"
    if result.warning:
        notification = f"{notification}. {result.warning}"
    response = _signed_in_response(services, context, notification=notification)
    await context.controller.load_data()
    return response


@router.post(
    "/forgot-password",
    response_model=ScreenResponse,
    responses=_ERROR_RESPONSES,
    summary="Send a password reset email",
)
async def forgot_password(
    body: ForgotPasswordRequest,
    services: AppServices = Depends(get_services),
) -> ScreenResponse:
    _require_fields(email=body.email)

    context = services.new_client(stack=[Destination.LOGIN, Destination.FORGOT_PASSWORD])
    try:
        result = await context.identity.reset_password(body.email.strip())
    finally:
        context.close()
    if isinstance(result, AuthFailure):
        raise AuthError(kind=result.kind, message=result.message)

    navigator = context.navigator
    navigator.navigate(Destination.LOGIN, pop_up_to=Destination.LOGIN, inclusive=True)
    return ScreenResponse(
        notification="A password reset email has been sent",
        navigation=NavigationState.from_navigator(navigator),
    )


@router.post(
    "/logout",
    response_model=ScreenResponse,
    summary="Sign out and end the client session",
)
async def logout(
    token: str = Depends(get_client_token),
    services: AppServices = Depends(get_services),
) -> ScreenResponse:
    """Unknown or already dropped tokens still land on Login."""
    context = services.registry.drop(token)
    logger.info("Client session ended (%d live)", len(services.registry))
    navigator = context.navigator if context else Navigator([Destination.HOME])
    navigator.navigate(Destination.LOGIN, pop_up_to=Destination.HOME, inclusive=True)
    return ScreenResponse(
        notification="Signed out",
        navigation=NavigationState.from_navigator(navigator),
    )
