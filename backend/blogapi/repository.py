"""
Blog API Backend — Persistence Gateway
=======================================

What:  The single place where SQLAlchemy statements are built and executed.
Why:   Services describe WHAT to fetch with a QuerySpec (filters, ordering,
       page window); the functions here decide HOW to run it. Services never
       chain select() calls themselves, so the storage client can change
       without touching domain code.
How:   Each operation takes the request's AsyncSession explicitly. Every
       SQLAlchemy failure is wrapped in StorageError (or its
       IntegrityViolationError subclass) before it leaves this module.

Operations:
    find_by_id(session, Model, id)          → row | None   (absent is not an error)
    find_one(session, spec)                 → row | None
    find_all(session, spec)                 → list of rows
    find_page(session, spec)                → Page(items, total_pages, ...)
    count(session, spec)                    → int
    create(session, row)                    → row with identity assigned
    update_by_id(session, Model, id, vals)  → row (NotFoundError if missing)
    delete_by_id(session, Model, id)        → deleted row count (0 if missing)
    delete_where(session, spec)             → deleted row count over the spec's filters

Pagination:
    Pages are 1-indexed. `page <= 0` is NOT validated here: routes reject it
    with a 400 before a QuerySpec is ever built. Results are always ordered;
    when a spec carries no ordering the primary key is used so that the same
    page returns the same rows across calls.
"""

import functools
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Generic, List, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, func, inspect, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement, Delete, Select

from blogapi.database import Base
from blogapi.exceptions import IntegrityViolationError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
ItemT = TypeVar("ItemT")


# ══════════════════════════════════════════════════════════════════════════
# Query Specification
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class QuerySpec(Generic[ModelT]):
    """
    Declarative description of a query against one model.

    Attributes:
        model:     ORM class to select from
        filters:   Clauses combined with AND
        any_of:    Clauses combined with OR, then AND-ed with `filters`
        order_by:  ORDER BY expressions; primary key ascending when empty
        page:      1-indexed page number (only used by find_page)
        page_size: Rows per page; None means "no window"

    Builder methods return a new spec; a QuerySpec is never mutated.

    Example:
        spec = (
            QuerySpec(Post)
            .matching_any(Post.title.icontains(q), Post.body.icontains(q))
            .ordered_by(Post.id.desc())
            .paged(page=2, page_size=5)
        )
    """

    model: Type[ModelT]
    filters: Sequence[ColumnElement[bool]] = field(default_factory=tuple)
    any_of: Sequence[ColumnElement[bool]] = field(default_factory=tuple)
    order_by: Sequence[Any] = field(default_factory=tuple)
    page: int = 1
    page_size: Optional[int] = None

    def where(self, *clauses: ColumnElement[bool]) -> "QuerySpec[ModelT]":
        return replace(self, filters=(*self.filters, *clauses))

    def matching_any(self, *clauses: ColumnElement[bool]) -> "QuerySpec[ModelT]":
        return replace(self, any_of=(*self.any_of, *clauses))

    def ordered_by(self, *columns: Any) -> "QuerySpec[ModelT]":
        return replace(self, order_by=(*self.order_by, *columns))

    def paged(self, page: int, page_size: int) -> "QuerySpec[ModelT]":
        return replace(self, page=page, page_size=page_size)

    # ── Statement builders ────────────────────────────────────────────────

    def _apply_filters(self, stmt):
        if self.filters:
            stmt = stmt.where(*self.filters)
        if self.any_of:
            stmt = stmt.where(or_(*self.any_of))
        return stmt

    def select_statement(self) -> Select:
        """SELECT with filters and a deterministic ORDER BY, no window."""
        stmt = self._apply_filters(select(self.model))
        ordering = self.order_by or tuple(inspect(self.model).primary_key)
        return stmt.order_by(*ordering)

    def count_statement(self) -> Select:
        """SELECT COUNT(*) over the same filters."""
        return self._apply_filters(select(func.count()).select_from(self.model))

    def delete_statement(self) -> Delete:
        """DELETE over the same filters; ordering and paging do not apply."""
        return self._apply_filters(delete(self.model))


@dataclass
class Page(Generic[ItemT]):
    """
    One window of results plus the numbers a client needs to page on.

    total_pages == ceil(total_items / size); an empty table has 0 pages.
    """

    items: List[ItemT]
    total_items: int
    total_pages: int
    page: int
    size: int


def total_pages_for(total_items: int, page_size: int) -> int:
    return (total_items + page_size - 1) // page_size


def resource_name(model: Type[Base]) -> str:
    return model.__name__.lower()


# ══════════════════════════════════════════════════════════════════════════
# Error translation
# ══════════════════════════════════════════════════════════════════════════


def _storage_errors(operation: str):
    """
    Decorator: converts SQLAlchemy exceptions raised by a gateway function
    into StorageError, keeping the original as __cause__ and in the context.
    Application exceptions (NotFoundError...) pass through untouched.
    """

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except IntegrityError as e:
                logger.warning("Integrity violation during %s: %s", operation, e.orig)
                raise IntegrityViolationError(
                    context={"operation": operation, "original_error": str(e.orig)},
                ) from e
            except SQLAlchemyError as e:
                logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
                raise StorageError(
                    context={"operation": operation, "error_type": type(e).__name__},
                ) from e

        return wrapper

    return decorator


# ══════════════════════════════════════════════════════════════════════════
# Read operations
# ══════════════════════════════════════════════════════════════════════════


@_storage_errors("find_by_id")
async def find_by_id(session: AsyncSession, model: Type[ModelT], id: Any) -> Optional[ModelT]:
    """Primary-key lookup. Returns None when no row matches."""
    return await session.get(model, id)


@_storage_errors("find_one")
async def find_one(session: AsyncSession, spec: QuerySpec[ModelT]) -> Optional[ModelT]:
    result = await session.execute(spec.select_statement().limit(1))
    return result.scalars().first()


@_storage_errors("find_all")
async def find_all(session: AsyncSession, spec: QuerySpec[ModelT]) -> List[ModelT]:
    result = await session.execute(spec.select_statement())
    return list(result.scalars().all())


@_storage_errors("count")
async def count(session: AsyncSession, spec: QuerySpec) -> int:
    result = await session.execute(spec.count_statement())
    return result.scalar() or 0


@_storage_errors("find_page")
async def find_page(session: AsyncSession, spec: QuerySpec[ModelT]) -> Page[ModelT]:
    """
    Execute `spec` as one page: COUNT(*) for the page total, then
    LIMIT/OFFSET for the rows.

    The two statements are not wrapped in a snapshot, so a concurrent
    insert between them can make total_pages lag by one row's worth.
    """
    if not spec.page_size:
        raise ValueError("find_page() needs a QuerySpec with page_size set")
    size = spec.page_size
    total_items = await count(session, spec)

    stmt = spec.select_statement().limit(size).offset((spec.page - 1) * size)
    result = await session.execute(stmt)
    items = list(result.scalars().all())

    return Page(
        items=items,
        total_items=total_items,
        total_pages=total_pages_for(total_items, size),
        page=spec.page,
        size=size,
    )


# ══════════════════════════════════════════════════════════════════════════
# Write operations
# ══════════════════════════════════════════════════════════════════════════


@_storage_errors("create")
async def create(session: AsyncSession, row: ModelT) -> ModelT:
    """
    Insert `row` and return it with its identity and server defaults loaded.

    Why flush (not commit): the request's session dependency owns the
    transaction and commits once the handler succeeds.
    """
    session.add(row)
    await session.flush()
    await session.refresh(row)
    return row


@_storage_errors("update_by_id")
async def update_by_id(
    session: AsyncSession,
    model: Type[ModelT],
    id: Any,
    values: Mapping[str, Any],
) -> ModelT:
    """
    Overwrite the given columns of row `id`.

    Callers pass every mutable field for a full replace; passing a subset is
    an explicit partial update.

    Raises:
        NotFoundError: no row with that primary key
    """
    row = await session.get(model, id)
    if row is None:
        raise NotFoundError(resource=resource_name(model), resource_id=id)

    for column, value in values.items():
        setattr(row, column, value)

    await session.flush()
    await session.refresh(row)
    return row


@_storage_errors("delete_by_id")
async def delete_by_id(session: AsyncSession, model: Type[ModelT], id: Any) -> int:
    """
    Delete row `id` and return how many rows went away.

    Deleting a missing id returns 0 and is not an error. Callers that need
    an existence guarantee must look the row up first.
    """
    pk = inspect(model).primary_key[0]
    result = await session.execute(delete(model).where(pk == id))
    return result.rowcount or 0


@_storage_errors("delete_where")
async def delete_where(session: AsyncSession, spec: QuerySpec) -> int:
    """Delete every row matching the spec's filters; 0 when none match."""
    result = await session.execute(spec.delete_statement())
    return result.rowcount or 0


@_storage_errors("delete_all")
async def delete_all(session: AsyncSession, model: Type[ModelT]) -> int:
    result = await session.execute(delete(model))
    return result.rowcount or 0
