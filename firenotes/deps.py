"""
Firenotes — FastAPI Dependencies
=================================

What:  Resolves the objects route handlers need from the request.
Why:   Handlers declare what they use (services, the caller's ClientContext)
       and FastAPI injects it; no handler reads app state or headers itself.

    get_services        → AppServices stored on app.state by create_app()
    get_client_token    → bearer token from the Authorization header
    get_client_context  → live ClientContext for that token, else 401
"""

from typing import Optional

from fastapi import Depends, Header, Request

from firenotes.exceptions import NotAuthenticatedError
from firenotes.services.container import AppServices
from firenotes.services.sessions import ClientContext


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_client_token(authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization:
        raise NotAuthenticatedError()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise NotAuthenticatedError(message="Malformed Authorization header")
    return token.strip()


def get_client_context(
    token: str = Depends(get_client_token),
    services: AppServices = Depends(get_services),
) -> ClientContext:
    context = services.registry.get(token)
    if context is None:
        raise NotAuthenticatedError(message="Your session has ended, please sign in again")
    return context
