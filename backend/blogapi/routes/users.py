"""
Blog API Backend — User Route Handlers
=======================================

What:  /users registration, lookup, replace, delete, and a user's posts.

Security Note:
    Responses are built from UserRead, which has no password field; the
    bcrypt hash never leaves the service layer.
"""

import logging

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.config import settings
from blogapi.database import get_db_session
from blogapi.exceptions import NotFoundError
from blogapi.middleware.context import RequestContext, get_request_context
from blogapi.routes.forms import body_as
from blogapi.routes.posts import export_page_metadata
from blogapi.schemas.common import PageData
from blogapi.schemas.envelope import ok, ok_message
from blogapi.schemas.user import UserCreate, UserUpdate
from blogapi.services.mutation_service import mutation_service
from blogapi.services.query_service import query_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", summary="List users (paginated)")
async def list_users(
    page: int = Query(default=1, ge=1),
    size: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    db: AsyncSession = Depends(get_db_session),
    ctx: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    result = await query_service.find_users_in_page(db, page, size)
    export_page_metadata(ctx, result)
    return ok(PageData.from_page(result))


@router.post("", summary="Register a user")
async def create_user(
    payload: UserCreate = Depends(body_as(UserCreate)),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    """409 when the email is already registered."""
    user = await mutation_service.create_user(db, payload)
    return ok(user, message="User created successfully")


@router.get("/{user_id}", summary="Get one user")
async def get_user(
    user_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    user = await query_service.find_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError(resource="user", resource_id=user_id)
    return ok(user)


@router.put("/{user_id}", summary="Replace a user")
async def update_user(
    user_id: int = Path(ge=1),
    payload: UserUpdate = Depends(body_as(UserUpdate)),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    user = await mutation_service.update_user_by_id(db, user_id, payload)
    return ok(user, message="User updated successfully")


@router.delete("/{user_id}", summary="Delete a user with their posts and comments")
async def delete_user(
    user_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    deleted = await mutation_service.delete_user(db, user_id)
    if not deleted:
        logger.info("Delete of missing user %s ignored", user_id)
    return ok_message("User deleted successfully")


@router.get("/{user_id}/posts", summary="Every post written by a user")
async def list_user_posts(
    user_id: int = Path(ge=1),
    db: AsyncSession = Depends(get_db_session),
    ctx: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    posts = await query_service.find_posts_by_user_id(db, user_id)
    ctx.metadata["total_count"] = str(len(posts))
    return ok(posts)
