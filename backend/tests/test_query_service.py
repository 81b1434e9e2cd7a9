"""
Blog API Backend — Query Service Unit Tests
============================================

What:  Tests for QueryService read operations.
How:   Real SQLite database for behaviour; mock session where a test must
       prove that no query ran.

What we test:
    ✅ Empty / whitespace search keyword is rejected before any DB call
    ✅ Search is case-insensitive, covers title OR body, newest first
    ✅ LIKE wildcards in the keyword are matched literally
    ✅ Comment listings carry author names ("Unknown" for missing authors)
    ✅ find_post_detail / find_posts_by_user_id existence rules
    ✅ Statistics totals
"""

from unittest.mock import AsyncMock, patch

import pytest

from blogapi import repository
from blogapi.exceptions import NotFoundError, ValidationError
from blogapi.models import Comment, Post, User
from blogapi.services.query_service import UNKNOWN_AUTHOR, QueryService


async def seed(session):
    """One author, three posts, two comments on the first post."""
    user = await repository.create(
        session, User(name="Alice", email="alice@example.com", password="x")
    )
    posts = [
        await repository.create(session, Post(user_id=user.id, title=title, body=body))
        for title, body in [
            ("Hello World", "intro"),
            ("Unrelated", "nothing to see"),
            ("Notes", "I said HELLO to everyone"),
        ]
    ]
    for text in ("first!", "second"):
        await repository.create(
            session, Comment(user_id=user.id, post_id=posts[0].id, content=text)
        )
    return user, posts


class TestSearchPosts:

    def setup_method(self):
        self.service = QueryService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("keyword", ["", "   ", "\t\n", None])
    async def test_empty_keyword_rejected_without_query(self, mock_db_session, keyword):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.search_posts(mock_db_session, keyword, 1, 5)

        assert exc_info.value.field == "q"
        mock_db_session.execute.assert_not_called()
        mock_db_session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_case_insensitive_title_or_body_newest_first(self, db_session):
        _, posts = await seed(db_session)

        page = await self.service.search_posts(db_session, "hello", 1, 5)

        assert [p.id for p in page.items] == [posts[2].id, posts[0].id]
        assert page.total_items == 2
        assert page.total_pages == 1

    @pytest.mark.asyncio
    async def test_keyword_is_trimmed(self, db_session):
        await seed(db_session)

        page = await self.service.search_posts(db_session, "  unrelated  ", 1, 5)

        assert [p.title for p in page.items] == ["Unrelated"]

    @pytest.mark.asyncio
    async def test_wildcards_match_literally(self, db_session):
        user, _ = await seed(db_session)
        await repository.create(
            db_session, Post(user_id=user.id, title="Save 50% today", body="")
        )

        assert (await self.service.search_posts(db_session, "50%", 1, 5)).total_items == 1
        assert (await self.service.search_posts(db_session, "%", 1, 5)).total_items == 1

    @pytest.mark.asyncio
    async def test_no_match_is_empty_page(self, db_session):
        await seed(db_session)

        page = await self.service.search_posts(db_session, "zebra", 1, 5)

        assert page.items == []
        assert page.total_pages == 0


class TestPostsAndUsers:

    def setup_method(self):
        self.service = QueryService()

    @pytest.mark.asyncio
    async def test_find_post_by_id(self, db_session):
        _, posts = await seed(db_session)

        found = await self.service.find_post_by_id(db_session, posts[1].id)

        assert found.title == "Unrelated"
        assert await self.service.find_post_by_id(db_session, 999) is None

    @pytest.mark.asyncio
    async def test_post_detail_includes_comments_oldest_first(self, db_session):
        _, posts = await seed(db_session)

        detail = await self.service.find_post_detail(db_session, posts[0].id)

        assert detail.title == "Hello World"
        assert [c.content for c in detail.comments] == ["first!", "second"]

    @pytest.mark.asyncio
    async def test_post_detail_missing_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.find_post_detail(db_session, 42)

    @pytest.mark.asyncio
    async def test_posts_by_user(self, db_session):
        user, _ = await seed(db_session)
        loner = await repository.create(
            db_session, User(name="Bob", email="bob@example.com", password="x")
        )

        assert len(await self.service.find_posts_by_user_id(db_session, user.id)) == 3
        assert await self.service.find_posts_by_user_id(db_session, loner.id) == []
        with pytest.raises(NotFoundError):
            await self.service.find_posts_by_user_id(db_session, 999)

    @pytest.mark.asyncio
    async def test_user_lookups_never_expose_password(self, db_session):
        user, _ = await seed(db_session)

        by_id = await self.service.find_user_by_id(db_session, user.id)
        by_email = await self.service.find_user_by_email(db_session, "alice@example.com")

        assert by_id == by_email
        assert "password" not in by_id.model_dump()
        assert await self.service.find_user_by_email(db_session, "nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_users_in_page(self, db_session):
        await seed(db_session)

        page = await self.service.find_users_in_page(db_session, 1, 10)

        assert page.total_items == 1
        assert page.items[0].name == "Alice"


class TestComments:

    def setup_method(self):
        self.service = QueryService()

    @pytest.mark.asyncio
    async def test_comments_page_has_author_names(self, db_session):
        _, posts = await seed(db_session)

        page = await self.service.find_comments_by_post_id_in_page(db_session, posts[0].id, 1, 5)

        assert page.total_items == 2
        assert [c.author_name for c in page.items] == ["Alice", "Alice"]

    @pytest.mark.asyncio
    async def test_missing_author_is_unknown(self, db_session):
        _, posts = await seed(db_session)

        with patch.object(self.service, "author_names", AsyncMock(return_value={})):
            page = await self.service.find_comments_by_post_id_in_page(
                db_session, posts[0].id, 1, 5
            )

        assert {c.author_name for c in page.items} == {UNKNOWN_AUTHOR}

    @pytest.mark.asyncio
    async def test_unknown_post_yields_empty_page(self, db_session):
        page = await self.service.find_comments_by_post_id_in_page(db_session, 999, 1, 5)
        assert page.items == [] and page.total_items == 0

    @pytest.mark.asyncio
    async def test_find_comment_by_id(self, db_session):
        _, posts = await seed(db_session)
        detail = await self.service.find_post_detail(db_session, posts[0].id)

        comment = await self.service.find_comment_by_id(db_session, detail.comments[0].id)

        assert comment.content == "first!"
        assert await self.service.find_comment_by_id(db_session, 999) is None


class TestStatistics:

    @pytest.mark.asyncio
    async def test_totals(self, db_session):
        await seed(db_session)

        stats = await QueryService().get_statistics(db_session)

        assert (stats.total_posts, stats.total_users, stats.total_comments) == (3, 1, 2)
