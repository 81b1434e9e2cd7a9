"""
Blog API Backend — Comment Schemas
===================================

What:  Request and response contracts for /posts/{id}/comments.

The post a comment belongs to always comes from the URL path, never from
the body, so a client cannot file a comment under a post it did not address.
"""

from pydantic import BaseModel, Field, field_validator

from blogapi.schemas.common import strip_required


class CommentCreate(BaseModel):
    user_id: int = Field(description="Commenter (must be an existing user)")
    content: str = Field(min_length=1)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        return strip_required(v, "content")


class CommentUpdate(CommentCreate):
    """Full replace of author and content."""


class CommentRead(BaseModel):
    id: int
    user_id: int
    post_id: int
    content: str

    model_config = {"from_attributes": True}


class CommentWithAuthor(CommentRead):
    """
    What:  A comment plus its author's display name.
    Why:   Saves the client one /users/{id} call per comment.
    Note:  author_name is "Unknown" when the author row no longer exists.
    """
    author_name: str
