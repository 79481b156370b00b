"""
Feed Backend — Post Store
===========================

What:  Repository over the `posts` table: list everything, insert one.
Why:   Routes and FeedService never touch SQLAlchemy directly; they receive
       a PostStore bound to the request's session (dependency injection).
How:   Wraps an AsyncSession. Database errors are translated into
       PersistenceError carrying the driver's message.
Who:   Built per request by `get_post_store`; used by FeedService.
"""

import logging
from typing import List

from fastapi import Depends
from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from feed_backend.database import get_db_session
from feed_backend.exceptions import PersistenceError
from feed_backend.models.post import Post

logger = logging.getLogger(__name__)


def _driver_message(exc: SQLAlchemyError) -> str:
    # DBAPIError keeps the driver exception in .orig; its text is the useful part
    original = getattr(exc, "orig", None)
    return str(original or exc) or type(exc).__name__


class PostStore:
    """
    Persistent collection of Post records.

    Operations:
        - list_posts(): every post, oldest first (ties broken by id)
        - add_post():   insert and commit a single post

    Single-document inserts are atomic: a failed commit is rolled back
    and nothing is stored.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_posts(self) -> List[Post]:
        try:
            result = await self.session.execute(
                select(Post).order_by(asc(Post.created_at), asc(Post.id))
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Store error listing posts: %s", e)
            raise PersistenceError(
                message=_driver_message(e),
                context={"operation": "list", "error_type": type(e).__name__},
            ) from e

    async def add_post(self, post: Post) -> Post:
        self.session.add(post)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Store error saving post '%s': %s", post.title, e)
            raise PersistenceError(
                message=_driver_message(e),
                context={"operation": "insert", "error_type": type(e).__name__},
            ) from e

        logger.info("Post stored: %s", post.id)
        return post


def get_post_store(db: AsyncSession = Depends(get_db_session)) -> PostStore:
    """FastAPI dependency: a PostStore bound to the request's session."""
    return PostStore(db)
