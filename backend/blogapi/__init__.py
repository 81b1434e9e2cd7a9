"""
Blog API Backend — Application Package Initializer
===================================================

What: Marks the `blogapi` directory as a Python package.
Why:  Enables module imports like `from blogapi.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    ┌─────────────────────────────────────┐
    │        Middleware Chain             │  ← request context, auth, headers, access log
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns + envelope only
    ├─────────────────────────────────────┤
    │   Services (Query / Mutation)       │  ← parent checks, conflicts, search rules
    ├─────────────────────────────────────┤
    │   Repository (Persistence Gateway)  │  ← QuerySpec → SQLAlchemy select()
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
