"""
Blog API Backend — Middleware Chain Composition
================================================

What:  Builds the ordered list of middleware units and installs it on an app.
Why:   Starlette's add_middleware() is last-added-outermost, which makes the
       execution order easy to get backwards. The chain is declared here
       outermost-first, the way it actually runs, and reversed on install.

Default chain (request enters at the top, response leaves at the top):

    RequestContextMiddleware    request ID + RequestContext
      RequestLoggingMiddleware  access line / trace span (sees final status)
        ResponseHeadersMiddleware  X-Request-ID, X-Auth-Status, X-Total-Count…
          AuthenticationMiddleware  fills context.auth
            GZipMiddleware
              CORSMiddleware
                → route handler
"""

from typing import Iterable, List, Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware import Middleware

from blogapi.config import settings
from blogapi.middleware.auth import AuthenticationMiddleware
from blogapi.middleware.logging import RequestLoggingMiddleware
from blogapi.middleware.request_context import RequestContextMiddleware
from blogapi.middleware.response_headers import ResponseHeadersMiddleware
from blogapi.security import CredentialVerifier

# Headers the browser may read from cross-origin responses
EXPOSED_HEADERS = [
    "X-Request-ID",
    "X-Auth-Status",
    "X-User-ID",
    "X-Username",
    "X-User-Role",
    "X-Total-Count",
    "X-Total-Pages",
]


def build_middleware_chain(
    credential_verifier: Optional[CredentialVerifier] = None,
    cors_origins: Optional[Sequence[str]] = None,
) -> List[Middleware]:
    """
    Return the default chain, first entry outermost.

    Args:
        credential_verifier: Passed to AuthenticationMiddleware; None keeps
                             the database-backed verifier.
        cors_origins:        Allowed origins; defaults to CORS_ORIGINS.
    """
    origins = list(settings.cors_origins_list if cors_origins is None else cors_origins)

    return [
        Middleware(RequestContextMiddleware),
        Middleware(RequestLoggingMiddleware),
        Middleware(ResponseHeadersMiddleware),
        Middleware(AuthenticationMiddleware, verifier=credential_verifier),
        # Don't compress small responses (overhead > savings)
        Middleware(GZipMiddleware, minimum_size=500),
        Middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=EXPOSED_HEADERS,
        ),
    ]


def register_middleware_chain(app: FastAPI, chain: Iterable[Middleware]) -> None:
    """
    Install `chain` so its first entry sees the raw request first and the
    final response last.
    """
    for unit in reversed(list(chain)):
        app.add_middleware(unit.cls, *unit.args, **unit.kwargs)
