"""
Blog API Backend — Post SQLAlchemy Model
=========================================

What:  ORM model representing the `posts` table.

The foreign key to users.id is declared for schema integrity, but the
application does not rely on it: the mutation service checks that the
author exists before inserting. ON DELETE CASCADE lets the database remove
a user's posts (and, through comments.post_id, their comments) when the
user row is deleted. No ORM relationship() is mapped; related
rows are fetched with explicit queries through the repository gateway.
"""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blogapi.database import Base


class Post(Base):
    """A blog post written by one user."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # Why TEXT: no artificial length limit on post bodies
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id}, title='{self.title}')>"
