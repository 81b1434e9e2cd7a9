"""
Blog API Backend — Authentication Middleware
=============================================

What:  Fills `context.auth` from the Authorization header.
Why:   Handlers and the response-header unit can tell "nobody tried to log
       in" apart from "someone tried and failed".
How:   Delegates the actual check to a CredentialVerifier (an async callable
       taking the raw header value). No route requires authentication; this
       unit only records the outcome.

Outcomes:
    header absent or blank → AuthStatus.NOT_ATTEMPTED (context left as-is)
    verifier rejects       → AuthStatus.REJECTED
    verifier raises        → AuthStatus.REJECTED ("verification unavailable"),
                             logged at error; the request still proceeds
    verifier accepts       → AuthStatus.AUTHENTICATED + UserInfo
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from blogapi.exceptions import BlogAPIError
from blogapi.middleware.context import AuthResult, get_request_context
from blogapi.security import CredentialVerifier, DatabaseCredentialVerifier

logger = logging.getLogger(__name__)

VERIFICATION_UNAVAILABLE = "verification unavailable"


class AuthenticationMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, verifier: Optional[CredentialVerifier] = None):
        super().__init__(app)
        self.verifier: CredentialVerifier = verifier or DatabaseCredentialVerifier()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = get_request_context(request)

        header = request.headers.get("Authorization", "")
        if header.strip():
            try:
                context.auth = await self.verifier(header)
            except BlogAPIError as e:
                logger.error(
                    "[%s] Credential check failed: %s: %s | Context: %s",
                    context.request_id, type(e).__name__, e.message, e.context,
                )
                context.auth = AuthResult.rejected(VERIFICATION_UNAVAILABLE)

            if context.auth.is_authenticated:
                logger.debug("Authenticated user %s", context.auth.user.user_id)
            else:
                logger.info("Authorization rejected: %s", context.auth.reason)

        return await call_next(request)
