"""
Feed Backend — Post SQLAlchemy Model
======================================

What:  ORM model representing the `posts` table.
Why:   Maps Python objects to stored post documents.
Who:   Used by PostStore for inserts/listing and by Alembic for schema management.

Table Design:
    - UUID primary key generated in Python (works on PostgreSQL and SQLite)
    - creator: JSON document embedded in the row, e.g. {"name": "anonymous"}
    - image_url: relative URL (images/<stored name>) or the configured placeholder
    - created_at: UTC with timezone, set when the row is created
    Posts are insert-only: there is no update or delete path.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from feed_backend.database import Base


class Post(Base):
    """A feed entry with title, content, optional image, and embedded creator."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # TEXT for both: no upper limit, the minimum lengths are enforced by PostCreate
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    creator: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Listing orders by created_at, id
    __table_args__ = (
        Index("idx_posts_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
