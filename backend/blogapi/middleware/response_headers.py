"""
Blog API Backend — Response Header Decoration
==============================================

What:  Copies request-scoped state into outbound response headers.
When:  Response phase, after the handler (and every inner unit) returned.

Headers written:
    X-Request-ID     always
    X-Auth-Status    always (not_attempted | rejected | authenticated)
    X-User-ID        when authenticated
    X-Username       when authenticated
    X-User-Role      when authenticated
    <mapped>         one header per exported metadata key that the handler
                     set, e.g. metadata["total_count"] → X-Total-Count
"""

from typing import Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from blogapi.middleware.context import get_request_context

DEFAULT_METADATA_HEADERS = {
    "total_count": "X-Total-Count",
    "total_pages": "X-Total-Pages",
}


def header_safe(value: object) -> str:
    """Header values must be latin-1; escape anything outside ASCII."""
    return str(value).encode("ascii", "backslashreplace").decode("ascii")


class ResponseHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, metadata_headers: Optional[Mapping[str, str]] = None):
        super().__init__(app)
        self.metadata_headers = dict(
            DEFAULT_METADATA_HEADERS if metadata_headers is None else metadata_headers
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        context = get_request_context(request)

        response.headers["X-Request-ID"] = header_safe(context.request_id)
        response.headers["X-Auth-Status"] = context.auth.status.value

        user = context.user
        if user is not None:
            response.headers["X-User-ID"] = str(user.user_id)
            response.headers["X-Username"] = header_safe(user.username)
            response.headers["X-User-Role"] = header_safe(user.role)

        for key, header in self.metadata_headers.items():
            if key in context.metadata:
                response.headers[header] = header_safe(context.metadata[key])

        return response
