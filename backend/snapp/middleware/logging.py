"""
SNApp Backend: Request Logging Middleware
===========================================

What:  One access-log line per HTTP request.
How:   Measures wall time around the downstream handler and logs method,
       path, status, duration, request id and the caller (user id when the
       auth proxy forwarded one, else the client IP).

Log levels:
    5xx → ERROR, 4xx → WARNING, everything else → INFO.

Never logged: request bodies (note content is private) and query strings
(search terms are note content too).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snapp.auth import USER_ID_HEADER
from snapp.middleware.request_id import request_id_var

logger = logging.getLogger("snapp.access")

QUIET_PATHS = {"/health"}


def _log_level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        user_id = request.headers.get(USER_ID_HEADER, "").strip() or "-"
        rid = request_id_var.get("")
        status = response.status_code

        logger.log(
            _log_level_for(status),
            "%s %s %d %.1fms [%s] user=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            user_id,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "user_id": user_id,
                "client_ip": client_ip,
            },
        )
        return response
