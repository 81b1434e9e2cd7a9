"""
Blog API Backend — Request Context
===================================

What:  The per-request state object attached by the first middleware.
Why:   Handlers and inner middleware need the request ID and the outcome of
       authentication without re-deriving them. The context is an explicit
       object, created once per request and reached by handlers through a
       FastAPI dependency (`Depends(get_request_context)`).
How:   RequestContextMiddleware stores it on `request.state.context`.
       The request ID is additionally published in a ContextVar so that the
       logging filter can stamp it on every log record of the request.

Lifetime:
    Created when the request enters the chain, dropped when the response
    has been sent. Never shared between requests.

Authentication states:
    NOT_ATTEMPTED  → no Authorization header
    REJECTED       → header present but malformed or wrong credentials
    AUTHENTICATED  → credentials verified; `auth.user` is populated
"""

import secrets
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from starlette.requests import Request

# ── Context Variable ──────────────────────────────────────────────────────
# Coroutine-local: concurrent requests on the same event loop each see
# their own value.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class AuthStatus(str, Enum):
    NOT_ATTEMPTED = "not_attempted"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


@dataclass(frozen=True)
class UserInfo:
    user_id: int
    username: str
    role: str = "author"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of one credential check. `user` is set only when authenticated."""

    status: AuthStatus = AuthStatus.NOT_ATTEMPTED
    user: Optional[UserInfo] = None
    reason: Optional[str] = None

    @classmethod
    def authenticated(cls, user: UserInfo) -> "AuthResult":
        return cls(status=AuthStatus.AUTHENTICATED, user=user)

    @classmethod
    def rejected(cls, reason: str) -> "AuthResult":
        return cls(status=AuthStatus.REJECTED, reason=reason)

    @property
    def is_authenticated(self) -> bool:
        return self.status is AuthStatus.AUTHENTICATED


@dataclass
class RequestContext:
    """
    Mutable per-request state.

    Attributes:
        request_id: Correlation ID, echoed in the X-Request-ID response header
        auth:       Authentication outcome (starts as NOT_ATTEMPTED)
        metadata:   Free-form string-keyed values; ResponseHeadersMiddleware
                    exports selected keys as response headers
    """

    request_id: str
    auth: AuthResult = field(default_factory=AuthResult)
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def user(self) -> Optional[UserInfo]:
        return self.auth.user


def generate_request_id() -> str:
    """
    Nanosecond timestamp plus 4 random hex chars, e.g. "17291712345678901234-9f3a".

    Unique enough to correlate log lines within one process; two requests
    arriving in the same nanosecond are separated by the random suffix.
    Not meant to be unguessable.
    """
    return f"{time.time_ns()}-{secrets.token_hex(2)}"


def get_request_context(request: Request) -> RequestContext:
    """
    FastAPI dependency returning the current request's context.

    Falls back to a fresh context when the chain did not run (e.g. a handler
    mounted on a bare test app), so handlers can rely on always getting one.
    """
    context = getattr(request.state, "context", None)
    if context is None:
        context = RequestContext(request_id=request_id_var.get() or generate_request_id())
        request.state.context = context
    return context
