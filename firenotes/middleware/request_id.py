"""
Firenotes — Request ID Middleware
==================================

What:  Assigns a short correlation ID to each request and echoes it back in
       the X-Request-ID response header.
Why:   Error bodies carry the same ID, so a notification shown to a user
       can be matched to the server log lines of that request.
How:   Reuses the client's X-Request-ID when sent, otherwise generates one.
       The ID lives in a ContextVar, so concurrent requests on one event
       loop never see each other's ID.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
