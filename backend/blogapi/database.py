"""
Blog API Backend — Database Session Management
===============================================

What:  The process-wide async engine, the session factory built on it, the
       declarative Base for the three tables, and the per-request session
       dependency.
How:   `get_db_session` owns the request's transaction: the gateway only
       flushes, the dependency commits once the handler returns and rolls
       back if anything raised.
Who:   Route handlers (Depends(get_db_session)), the credential verifier
       (its own short session), Alembic and the tests (Base.metadata).
When:  Engine built on first import of this module; one session per request.

Pool settings (PostgreSQL only; SQLite URLs get the driver default):
    DB_POOL_SIZE (20) + DB_MAX_OVERFLOW (10) → at most 30 connections
    DB_POOL_PRE_PING                         → stale connections are replaced
    pool_recycle=3600                        → no connection lives past an hour

    The engine is the only process-wide shared object. It is safe for
    concurrent use by construction; no application-level locking exists.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from blogapi.config import settings


def _engine_options() -> Dict[str, Any]:
    """
    What:  Keyword arguments for create_async_engine().
    Why:   SQLite (used by the test suite) rejects QueuePool sizing options.
    """
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """
    SQLite ignores FOREIGN KEY clauses unless each connection opts in;
    without this, ON DELETE CASCADE silently does nothing.
    """

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine: AsyncEngine = create_async_engine(settings.database_url, **_engine_options())
if settings.is_sqlite:
    enable_sqlite_foreign_keys(engine)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: rows stay readable after commit, so handlers can
# serialize them once the dependency has committed
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with a single metadata
    object (used by Alembic and by the test suite's create_all()).
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/posts/{post_id}")
        async def show(post_id: int, db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
