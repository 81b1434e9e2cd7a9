"""
Blog API Backend — Request Context Middleware
==============================================

What:  Creates the RequestContext for each incoming request.
Why:   Every later middleware, every handler and every log line of the
       request share one request ID and one place to put per-request data.
How:   Builds the context, stores it in `request.state.context` and
       publishes the request ID in a ContextVar for the logging filter.
When:  Outermost unit of the chain (runs before all other processing).

Request ID source:
    1. X-Request-ID header from the client, if present and sane
       (enables end-to-end tracing from a frontend or proxy)
    2. Otherwise generated: nanosecond timestamp + short random suffix
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blogapi.middleware.context import RequestContext, generate_request_id, request_id_var

# Longer client-supplied IDs are replaced, not truncated
MAX_CLIENT_REQUEST_ID_LENGTH = 128


def _client_request_id(request: Request) -> str:
    value = request.headers.get("X-Request-ID", "").strip()
    if not value or len(value) > MAX_CLIENT_REQUEST_ID_LENGTH or not value.isprintable():
        return ""
    return value


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Attaches a fresh RequestContext (unauthenticated, empty metadata).

    The ContextVar is reset once the response is produced so the value
    never bleeds into whatever the event loop runs next.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = _client_request_id(request) or generate_request_id()

        request.state.context = RequestContext(request_id=rid)
        token = request_id_var.set(rid)
        try:
            return await call_next(request)
        finally:
            request_id_var.reset(token)
