"""
Blog API Backend — User SQLAlchemy Model
=========================================

What:  ORM model representing the `users` table.
Who:   Used by the repository gateway and by the credential verifier.

Table Design:
    - Integer primary key (autoincrement)
    - email: unique — duplicate inserts raise IntegrityError, which the
      mutation service reports as ConflictError
    - password: bcrypt hash, never the plain text, never serialized
    - created_at / updated_at: UTC, set by Python on insert/update with a
      server default as fallback for rows written outside the ORM
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from blogapi.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered author. Owns zero or more posts and comments."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login identifier — unique across all users",
    )

    # What: bcrypt hash ($2b$...), 60 chars; 255 leaves room for other schemes
    password: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
