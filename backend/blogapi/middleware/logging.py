"""
Blog API Backend — Request Logging Middleware
==============================================

What:  One access-log line per request, plus an optional trace span record.
Why:   Enables monitoring, debugging and performance analysis; the request ID
       ties the access line to every other log line of the same request.
How:   Measures from middleware entry to response return, picks the log
       level from the status class, and, when trace export is enabled, emits
       a structured span to the `blogapi.trace` logger.
When:  Right after RequestContextMiddleware (so the request ID exists and
       the duration covers every inner unit).

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, client IP, request ID, auth status
    ❌ Don't log: request body, Authorization header, query values
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blogapi.logging_config import TRACE_LOGGER_NAME
from blogapi.middleware.context import get_request_context

logger = logging.getLogger("blogapi.access")
trace_logger = logging.getLogger(TRACE_LOGGER_NAME)

# Probes hit these every few seconds; logging them buries real traffic
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Level by status:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        start_ns = time.time_ns()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path

        if path in QUIET_PATHS:
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        context = get_request_context(request)
        rid = context.request_id

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        if trace_logger.isEnabledFor(logging.INFO):
            trace_logger.info(
                "%s %s",
                method,
                path,
                extra={
                    "span": {
                        "name": f"{method} {path}",
                        "trace_id": rid,
                        "start_time_ns": start_ns,
                        "duration_ms": round(duration_ms, 3),
                        "attributes": {
                            "http.method": method,
                            "http.route": path,
                            "http.status_code": status,
                            "auth.status": context.auth.status.value,
                        },
                    }
                },
            )

        return response
