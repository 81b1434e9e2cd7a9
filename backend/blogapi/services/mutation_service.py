"""
Blog API Backend — Mutation Service (Write Side)
=================================================

What:  Create / update / delete for posts, users and comments.
Why:   Encapsulates the write rules independent of HTTP concerns:
       parent-existence checks, email uniqueness, password hashing.
How:   Reads parents through QueryService, writes through the repository
       gateway, maps written rows back to response schemas.

Write rules:
    create_post          user must exist                       → NotFoundError
    update_post_by_id    post must exist, new author must exist → NotFoundError
    create_user          email must be free                    → ConflictError
    update_user_by_id    user must exist; email free or own    → NotFound / Conflict
    create_comment       post and author must exist            → NotFoundError
    update_comment_by_id post, comment (on that post), author  → NotFoundError
    delete_*             missing id is not an error; returns the deleted count
    delete_comment       scoped to its post; another post's comment → 0 deleted

Known gap:
    Parent checks and the insert that follows are separate statements with
    no lock between them. A parent deleted in that window leaves an orphan
    row on databases that do not enforce the foreign key.
"""

import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi import repository
from blogapi.exceptions import ConflictError, IntegrityViolationError, NotFoundError
from blogapi.models import Comment, Post, User
from blogapi.repository import QuerySpec
from blogapi.schemas.comment import CommentCreate, CommentUpdate, CommentWithAuthor
from blogapi.schemas.common import to_schema
from blogapi.schemas.post import PostCreate, PostRead, PostUpdate
from blogapi.schemas.user import UserCreate, UserRead, UserUpdate
from blogapi.security import hash_password
from blogapi.services.query_service import query_service

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"


class MutationService:
    """
    Write-side business logic.

    Error Handling Strategy:
        Storage failures arrive from the gateway already wrapped in
        StorageError and propagate unchanged. The only one translated here is
        a unique-key violation on users.email, which becomes ConflictError.
    """

    # ── Parent checks ─────────────────────────────────────────────────────

    async def _require_user(self, db: AsyncSession, user_id: int) -> User:
        user = await repository.find_by_id(db, User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    async def _require_post(self, db: AsyncSession, post_id: int) -> Post:
        post = await repository.find_by_id(db, Post, post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=post_id)
        return post

    # ══════════════════════════════════════════════════════════════════════
    # Posts
    # ══════════════════════════════════════════════════════════════════════

    async def create_post(self, db: AsyncSession, data: PostCreate) -> PostRead:
        """
        Insert a post after checking that its author exists.

        Raises:
            NotFoundError: data.user_id names no user (nothing is written)
        """
        await self._require_user(db, data.user_id)
        row = await repository.create(
            db, Post(user_id=data.user_id, title=data.title, body=data.body)
        )
        logger.info("Post %s created by user %s", row.id, row.user_id)
        return to_schema(PostRead, row, "post")

    async def update_post_by_id(self, db: AsyncSession, post_id: int, data: PostUpdate) -> PostRead:
        await self._require_post(db, post_id)
        await self._require_user(db, data.user_id)
        row = await repository.update_by_id(
            db,
            Post,
            post_id,
            {"user_id": data.user_id, "title": data.title, "body": data.body},
        )
        logger.info("Post %s updated", post_id)
        return to_schema(PostRead, row, "post")

    async def delete_post(self, db: AsyncSession, post_id: int) -> int:
        deleted = await repository.delete_by_id(db, Post, post_id)
        logger.info("Delete post %s: %d row(s)", post_id, deleted)
        return deleted

    async def delete_all_posts(self, db: AsyncSession) -> int:
        return await repository.delete_all(db, Post)

    # ══════════════════════════════════════════════════════════════════════
    # Users
    # ══════════════════════════════════════════════════════════════════════

    async def create_user(self, db: AsyncSession, data: UserCreate) -> UserRead:
        """
        Register a user with a bcrypt-hashed password.

        Two layers guard the unique email:
            1. Lookup before insert → ConflictError with no write attempted
            2. The unique index, for a concurrent insert that slipped past
               the lookup → IntegrityViolationError, reported as ConflictError

        Raises:
            ConflictError: email already registered (→ 409)
        """
        if await query_service.find_user_row_by_email(db, data.email) is not None:
            raise ConflictError(message=DUPLICATE_EMAIL_MESSAGE, context={"email": data.email})

        user = User(
            name=data.name,
            email=data.email,
            password=await run_in_threadpool(hash_password, data.password),
        )
        try:
            row = await repository.create(db, user)
        except IntegrityViolationError as e:
            raise ConflictError(message=DUPLICATE_EMAIL_MESSAGE, context=e.context) from e

        logger.info("User %s registered", row.id)
        return to_schema(UserRead, row, "user")

    async def update_user_by_id(self, db: AsyncSession, user_id: int, data: UserUpdate) -> UserRead:
        """
        Full replace of name, email and password.

        Raises:
            NotFoundError: no such user
            ConflictError: email belongs to a different user
        """
        await self._require_user(db, user_id)

        owner = await repository.find_one(
            db, QuerySpec(User).where(User.email == data.email, User.id != user_id)
        )
        if owner is not None:
            raise ConflictError(message=DUPLICATE_EMAIL_MESSAGE, context={"email": data.email})

        values = {
            "name": data.name,
            "email": data.email,
            "password": await run_in_threadpool(hash_password, data.password),
        }
        try:
            row = await repository.update_by_id(db, User, user_id, values)
        except IntegrityViolationError as e:
            raise ConflictError(message=DUPLICATE_EMAIL_MESSAGE, context=e.context) from e

        logger.info("User %s updated", user_id)
        return to_schema(UserRead, row, "user")

    async def delete_user(self, db: AsyncSession, user_id: int) -> int:
        deleted = await repository.delete_by_id(db, User, user_id)
        logger.info("Delete user %s: %d row(s)", user_id, deleted)
        return deleted

    async def delete_all_users(self, db: AsyncSession) -> int:
        return await repository.delete_all(db, User)

    # ══════════════════════════════════════════════════════════════════════
    # Comments
    # ══════════════════════════════════════════════════════════════════════

    async def create_comment(
        self,
        db: AsyncSession,
        post_id: int,
        data: CommentCreate,
    ) -> CommentWithAuthor:
        """
        Attach a comment to `post_id`.

        Raises:
            NotFoundError: post or author missing (nothing is written)
        """
        await self._require_post(db, post_id)
        author = await self._require_user(db, data.user_id)

        row = await repository.create(
            db, Comment(post_id=post_id, user_id=data.user_id, content=data.content)
        )
        return to_schema(CommentWithAuthor, row, "comment", author_name=author.name)

    async def update_comment_by_id(
        self,
        db: AsyncSession,
        post_id: int,
        comment_id: int,
        data: CommentUpdate,
    ) -> CommentWithAuthor:
        """
        Replace a comment's author and content.

        A comment addressed through a post it does not belong to is
        reported as not found.
        """
        await self._require_post(db, post_id)

        existing = await repository.find_by_id(db, Comment, comment_id)
        if existing is None or existing.post_id != post_id:
            raise NotFoundError(resource="comment", resource_id=comment_id)

        author = await self._require_user(db, data.user_id)

        row = await repository.update_by_id(
            db,
            Comment,
            comment_id,
            {"user_id": data.user_id, "content": data.content},
        )
        return to_schema(CommentWithAuthor, row, "comment", author_name=author.name)

    async def delete_comment(self, db: AsyncSession, post_id: int, comment_id: int) -> int:
        """
        Delete `comment_id` only if it belongs to `post_id`.

        A comment on another post is left alone and counts as 0 deleted,
        the same as a missing id.
        """
        deleted = await repository.delete_where(
            db, QuerySpec(Comment).where(Comment.id == comment_id, Comment.post_id == post_id)
        )
        logger.info("Delete comment %s on post %s: %d row(s)", comment_id, post_id, deleted)
        return deleted


# ── Singleton Instance ────────────────────────────────────────────────────
mutation_service = MutationService()
