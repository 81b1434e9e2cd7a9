# Middleware package init
"""
Blog API Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.
Why:   Middleware handles functionality needed across all routes without
       duplicating code in each route handler.

Middleware Chain (declared outermost-first in chain.py):
    Request → [Context] → [Logging] → [Headers] → [Auth] → [GZip] → [CORS] → Handler

    Why this order:
    1. Context FIRST: every later unit and every log line needs the request ID
    2. Logging: wraps everything else, so duration and status are final
    3. Headers: runs its response phase after auth has filled the context
    4. Auth: records the credential outcome before the handler runs

    The order is reversed for responses:
    Response ← [Context] ← [Logging] ← [Headers] ← [Auth] ← … ← Handler

Each unit may short-circuit by returning a response without calling
call_next; units outside it still see that response on the way out.
"""
