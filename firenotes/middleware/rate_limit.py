"""
Firenotes — Auth Rate Limiting Middleware
==========================================

What:  Per-IP sliding window limit on the credential endpoints (/auth/*).
Why:   Login, sign-up and password reset each hit the identity provider;
       unthrottled they allow password guessing and reset-email floods.
       Home requests are already tied to a signed-in client and are not
       limited.

Algorithm: Sliding Window Counter
    1. Each IP keeps the timestamps of its recent auth requests
    2. Timestamps older than the window are discarded on each request
    3. If the remaining count reaches the limit, reply 429 with Retry-After
    4. Otherwise record the request and let it through

Single-process only: the counters live in this worker's memory.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from firenotes.config import settings
from firenotes.exceptions import RateLimitExceededError
from firenotes.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

LIMITED_PREFIX = "/auth/"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests: Requests allowed per window and IP
            (default: settings.auth_rate_limit_requests).
        window_seconds: Window length (default: settings.auth_rate_limit_window).
    """

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.auth_rate_limit_requests
        self.window_seconds = window_seconds or settings.auth_rate_limit_window
        self._requests: Dict[str, List[float]] = defaultdict(list)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not request.url.path.startswith(LIMITED_PREFIX):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - self.window_seconds

        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= self.max_requests:
            retry_after = int(recent[0] + self.window_seconds - now) + 1
            logger.warning(
                "Auth rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(recent),
                self.window_seconds,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        recent.append(now)
        self._forget_idle(window_start)
        return await call_next(request)

    def _forget_idle(self, window_start: float) -> None:
        idle = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in idle:
            del self._requests[ip]
        if idle:
            logger.debug("Dropped %d idle IP entries", len(idle))
