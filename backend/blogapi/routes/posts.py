"""
Blog API Backend — Post Route Handlers
=======================================

What:  /posts listing, search, detail, create, update and delete.
How:   Each handler parses its parameters, calls one service method and wraps
       the result in the envelope. Errors are raised, never rendered here:
       the global exception handlers turn them into envelopes.
Who:   Called by API clients and the static front page (form posts).

Listing responses also set `total_count` / `total_pages` in the request
context metadata, which ResponseHeadersMiddleware exports as the
X-Total-Count / X-Total-Pages headers.
"""

import logging

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.config import settings
from blogapi.database import get_db_session
from blogapi.middleware.context import RequestContext, get_request_context
from blogapi.repository import Page
from blogapi.routes.forms import body_as
from blogapi.schemas.common import PageData
from blogapi.schemas.envelope import ok, ok_message
from blogapi.schemas.post import PostCreate, PostUpdate
from blogapi.services.mutation_service import mutation_service
from blogapi.services.query_service import query_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])

SEARCH_PAGE_SIZE = 5


def export_page_metadata(ctx: RequestContext, page: Page) -> None:
    ctx.metadata["total_count"] = str(page.total_items)
    ctx.metadata["total_pages"] = str(page.total_pages)


@router.get("", summary="List posts (paginated, oldest first)")
async def list_posts(
    page: int = Query(default=1, ge=1, description="1-indexed page number"),
    size: int = Query(
        default=settings.default_page_size, ge=1, le=settings.max_page_size,
        description="Items per page",
    ),
    db: AsyncSession = Depends(get_db_session),
    ctx: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    result = await query_service.find_posts_in_page(db, page, size)
    export_page_metadata(ctx, result)
    return ok(PageData.from_page(result))


# Declared before /{post_id} so "search" is never parsed as an id
@router.get("/search", summary="Search posts by keyword in title or body")
async def search_posts(
    q: str = Query(default="", description="Keyword (case-insensitive substring)"),
    page: int = Query(default=1, ge=1),
    size: int = Query(default=SEARCH_PAGE_SIZE, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db_session),
    ctx: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    """An empty or whitespace-only `q` is rejected with 400."""
    result = await query_service.search_posts(db, q, page, size)
    export_page_metadata(ctx, result)
    return ok(PageData.from_page(result))


@router.get("/{post_id}", summary="Get one post with its comments")
async def get_post(
    post_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    return ok(await query_service.find_post_detail(db, post_id))


@router.post("", summary="Create a post (JSON or form body)")
async def create_post(
    payload: PostCreate = Depends(body_as(PostCreate)),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    post = await mutation_service.create_post(db, payload)
    return ok(post, message="Post created successfully")


@router.api_route("/{post_id}", methods=["PUT", "POST"], summary="Replace a post")
async def update_post(
    post_id: int = Path(ge=1),
    payload: PostUpdate = Depends(body_as(PostUpdate)),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    post = await mutation_service.update_post_by_id(db, post_id, payload)
    return ok(post, message="Post updated successfully")


@router.delete("/{post_id}", summary="Delete a post and its comments")
async def delete_post(
    post_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    """Deleting an id that does not exist still answers 200."""
    deleted = await mutation_service.delete_post(db, post_id)
    if not deleted:
        logger.info("Delete of missing post %s ignored", post_id)
    return ok_message("Post deleted successfully")

