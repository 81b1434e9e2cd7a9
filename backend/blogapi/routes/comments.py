"""
Blog API Backend — Comment Route Handlers
==========================================

What:  Comments nested under a post: /posts/{post_id}/comments[/{comment_id}].
Why nested: a comment only exists in the context of its post, so the post id
       always comes from the path and is checked before any write.

Endpoints:
    GET    /posts/{post_id}/comments               paginated, with author names
    POST   /posts/{post_id}/comments               create (JSON or form)
    PUT    /posts/{post_id}/comments/{comment_id}  replace author + content
    DELETE /posts/{post_id}/comments/{comment_id}  idempotent delete
"""

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.config import settings
from blogapi.database import get_db_session
from blogapi.middleware.context import RequestContext, get_request_context
from blogapi.routes.forms import body_as
from blogapi.routes.posts import export_page_metadata
from blogapi.schemas.comment import CommentCreate, CommentUpdate
from blogapi.schemas.common import PageData
from blogapi.schemas.envelope import ok, ok_message
from blogapi.services.mutation_service import mutation_service
from blogapi.services.query_service import query_service

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["Comments"])

COMMENTS_PAGE_SIZE = 5


@router.get("", summary="List a post's comments (oldest first)")
async def list_comments(
    post_id: int = Path(ge=1),
    page: int = Query(default=1, ge=1),
    size: int = Query(default=COMMENTS_PAGE_SIZE, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db_session),
    ctx: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    result = await query_service.find_comments_by_post_id_in_page(db, post_id, page, size)
    export_page_metadata(ctx, result)
    return ok(PageData.from_page(result))


@router.post("", summary="Add a comment to a post")
async def create_comment(
    post_id: int = Path(ge=1),
    payload: CommentCreate = Depends(body_as(CommentCreate)),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    comment = await mutation_service.create_comment(db, post_id, payload)
    return ok(comment, message="Comment created successfully")


@router.put("/{comment_id}", summary="Replace a comment")
async def update_comment(
    post_id: int = Path(ge=1),
    comment_id: int = Path(ge=1),
    payload: CommentUpdate = Depends(body_as(CommentUpdate)),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    comment = await mutation_service.update_comment_by_id(db, post_id, comment_id, payload)
    return ok(comment, message="Comment updated successfully")


@router.delete("/{comment_id}", summary="Delete a comment")
async def delete_comment(
    post_id: int = Path(ge=1),
    comment_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    await mutation_service.delete_comment(db, post_id, comment_id)
    return ok_message("Comment deleted successfully")
