"""
Blog API Backend — Post Schemas
================================

What:  Request and response contracts for /posts.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator

from blogapi.schemas.comment import CommentRead
from blogapi.schemas.common import strip_required


class PostCreate(BaseModel):
    """
    Body of POST /posts. Accepted as JSON or as a form.

    Why user_id in the body: the API has no authorization layer, so the
    author is named explicitly and checked for existence by the service.
    """
    user_id: int = Field(description="Author (must be an existing user)")
    title: str = Field(min_length=1, max_length=255)
    body: str = Field(default="")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return strip_required(v, "title")


class PostUpdate(PostCreate):
    """Body of PUT|POST /posts/{id}. Full replace of title, body and author."""


class PostRead(BaseModel):
    id: int
    user_id: int
    title: str
    body: str

    model_config = {"from_attributes": True}


class PostDetail(PostRead):
    """GET /posts/{id}: the post plus all of its comments, oldest first."""
    comments: List[CommentRead] = Field(default_factory=list)
