"""
Blog API Backend — Query Service (Read Side)
=============================================

What:  Read operations for posts, users and comments.
Why:   Routes stay thin: they parse parameters and call one method here.
How:   Each method builds a QuerySpec and hands it to the repository gateway,
       then maps rows to response schemas.
Who:   Called by route handlers, the mutation service (parent checks) and
       the credential verifier (email lookup).

Design Decision:
    QueryService is stateless — it receives the db session for each call,
    so concurrent requests never share anything but the engine's pool.

Absent vs. error:
    find_* methods return None when the row does not exist; only the
    methods whose contract is "this must exist" raise NotFoundError.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from blogapi import repository
from blogapi.exceptions import NotFoundError, ValidationError
from blogapi.models import Comment, Post, User
from blogapi.repository import Page, QuerySpec
from blogapi.schemas.comment import CommentRead, CommentWithAuthor
from blogapi.schemas.common import Statistics, to_schema
from blogapi.schemas.post import PostDetail, PostRead
from blogapi.schemas.user import UserRead

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown"


def _page_of(page: Page, items: list) -> Page:
    return Page(
        items=items,
        total_items=page.total_items,
        total_pages=page.total_pages,
        page=page.page,
        size=page.size,
    )


class QueryService:
    """
    Read-side business logic.

    Responsibilities:
        - Single-row lookups (post, user, comment) with None for "absent"
        - Paginated listings with stable ordering
        - Keyword search over posts
        - Comment listings enriched with author names
        - Table-level statistics
    """

    # ══════════════════════════════════════════════════════════════════════
    # Posts
    # ══════════════════════════════════════════════════════════════════════

    async def find_post_by_id(self, db: AsyncSession, post_id: int) -> Optional[PostRead]:
        row = await repository.find_by_id(db, Post, post_id)
        return to_schema(PostRead, row, "post") if row is not None else None

    async def find_post_detail(self, db: AsyncSession, post_id: int) -> PostDetail:
        """
        A post with all of its comments (oldest first).

        Query plan:
            SELECT ... FROM posts WHERE id = :id                 (primary key)
            SELECT ... FROM comments WHERE post_id = :id ORDER BY id

        Raises:
            NotFoundError: no post with that id
        """
        row = await repository.find_by_id(db, Post, post_id)
        if row is None:
            raise NotFoundError(resource="post", resource_id=post_id)

        comments = await repository.find_all(
            db, QuerySpec(Comment).where(Comment.post_id == post_id)
        )
        return to_schema(
            PostDetail,
            row,
            "post",
            comments=[to_schema(CommentRead, c, "comment") for c in comments],
        )

    async def find_posts_in_page(self, db: AsyncSession, page: int, size: int) -> Page:
        """Posts ordered by id ascending. Returns Page[PostRead]."""
        result = await repository.find_page(db, QuerySpec(Post).paged(page, size))
        return _page_of(result, [to_schema(PostRead, row, "post") for row in result.items])

    async def find_posts_by_user_id(self, db: AsyncSession, user_id: int) -> List[PostRead]:
        """
        Every post written by `user_id`.

        Raises:
            NotFoundError: the user does not exist (an existing user with no
                           posts yields an empty list instead)
        """
        if await repository.find_by_id(db, User, user_id) is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        rows = await repository.find_all(db, QuerySpec(Post).where(Post.user_id == user_id))
        return [to_schema(PostRead, row, "post") for row in rows]

    async def search_posts(
        self,
        db: AsyncSession,
        keyword: str,
        page: int,
        size: int,
    ) -> Page:
        """
        Case-insensitive substring search over title OR body, newest first.

        The keyword is trimmed; an empty or whitespace-only keyword is
        rejected before any query runs. LIKE wildcards in the keyword are
        escaped, so "50%" matches the literal text "50%".

        Raises:
            ValidationError: empty keyword (→ 400)
        """
        keyword = (keyword or "").strip()
        if not keyword:
            raise ValidationError(message="Search keyword is required", field="q")

        spec = (
            QuerySpec(Post)
            .matching_any(
                Post.title.icontains(keyword, autoescape=True),
                Post.body.icontains(keyword, autoescape=True),
            )
            .ordered_by(Post.id.desc())
            .paged(page, size)
        )
        result = await repository.find_page(db, spec)
        logger.debug("Search %r matched %d posts", keyword, result.total_items)
        return _page_of(result, [to_schema(PostRead, row, "post") for row in result.items])

    # ══════════════════════════════════════════════════════════════════════
    # Users
    # ══════════════════════════════════════════════════════════════════════

    async def find_user_by_id(self, db: AsyncSession, user_id: int) -> Optional[UserRead]:
        row = await repository.find_by_id(db, User, user_id)
        return to_schema(UserRead, row, "user") if row is not None else None

    async def find_user_row_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """ORM row (including the password hash) — for credential checks only."""
        return await repository.find_one(db, QuerySpec(User).where(User.email == email))

    async def find_user_by_email(self, db: AsyncSession, email: str) -> Optional[UserRead]:
        row = await self.find_user_row_by_email(db, email)
        return to_schema(UserRead, row, "user") if row is not None else None

    async def find_users_in_page(self, db: AsyncSession, page: int, size: int) -> Page:
        result = await repository.find_page(db, QuerySpec(User).paged(page, size))
        return _page_of(result, [to_schema(UserRead, row, "user") for row in result.items])

    # ══════════════════════════════════════════════════════════════════════
    # Comments
    # ══════════════════════════════════════════════════════════════════════

    async def find_comment_by_id(self, db: AsyncSession, comment_id: int) -> Optional[CommentRead]:
        row = await repository.find_by_id(db, Comment, comment_id)
        return to_schema(CommentRead, row, "comment") if row is not None else None

    async def find_comments_by_post_id_in_page(
        self,
        db: AsyncSession,
        post_id: int,
        page: int,
        size: int,
    ) -> Page:
        """
        Comments of one post, oldest first, each with its author's name.

        A post with no comments (or a post id that does not exist) yields an
        empty page rather than an error.

        Author names are fetched in one IN (...) query for the whole page
        instead of one lookup per comment.
        """
        spec = QuerySpec(Comment).where(Comment.post_id == post_id).paged(page, size)
        result = await repository.find_page(db, spec)

        names = await self.author_names(db, (c.user_id for c in result.items))
        items = [
            to_schema(
                CommentWithAuthor,
                c,
                "comment",
                author_name=names.get(c.user_id, UNKNOWN_AUTHOR),
            )
            for c in result.items
        ]
        return _page_of(result, items)

    async def author_names(self, db: AsyncSession, user_ids: Iterable[int]) -> Dict[int, str]:
        """Map user id → name for the given ids; missing users are left out."""
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        users = await repository.find_all(db, QuerySpec(User).where(User.id.in_(ids)))
        return {u.id: u.name for u in users}

    # ══════════════════════════════════════════════════════════════════════
    # Statistics
    # ══════════════════════════════════════════════════════════════════════

    async def get_statistics(self, db: AsyncSession) -> Statistics:
        return Statistics(
            total_posts=await repository.count(db, QuerySpec(Post)),
            total_users=await repository.count(db, QuerySpec(User)),
            total_comments=await repository.count(db, QuerySpec(Comment)),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
query_service = QueryService()
