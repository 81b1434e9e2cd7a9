"""
Blog API Backend — ORM Models
==============================

Importing this package registers every table with `Base.metadata`
(Alembic autogenerate and the test suite's create_all() rely on it).
"""

from blogapi.models.comment import Comment
from blogapi.models.post import Post
from blogapi.models.user import User

__all__ = ["User", "Post", "Comment"]
