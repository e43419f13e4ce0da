"""Custom middleware for the Pulsecheck API.

Middleware runs on EVERY request — before and after your route code.
"""

import uuid
import time
import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Polled by load balancers; logged at DEBUG only
QUIET_PATHS = frozenset({"/health"})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags every request with an ID and logs its outcome.

    The ID comes from the client's X-Request-ID header when present, so an
    operator dashboard can correlate a button press with the fix it triggered.
    It is exposed to routes as ``request.state.request_id`` and echoed back
    with the elapsed time in X-Response-Time.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        if response.status_code >= 500:
            level = logging.ERROR
        logger.log(
            level,
            "[%s] %s %s → %s (%sms)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )

        return response
