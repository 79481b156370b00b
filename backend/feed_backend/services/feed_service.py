"""
Feed Backend — Feed Service (Business Logic)
==============================================

What:  List and create posts on top of an injected PostStore and ImageService.
Why:   Keeps validation and orchestration independent of HTTP concerns.
How:   create_post runs validate → image intake → persist; list_posts is a
       straight read. Results are returned as response schemas.
Who:   Built per request by `get_feed_service`; called by routes/feed.py.

Orchestration Flow (POST /feed/post):
    ┌──────────┐    ┌────────────┐    ┌──────────────┐    ┌──────────┐
    │  Fields  │───▶│  Validate  │───▶│ Image Intake │───▶│  Store   │
    │  (Route) │    │ (pydantic) │    │ (optional)   │    │ (commit) │
    └──────────┘    └────────────┘    └──────────────┘    └──────────┘

    Validation failure: ValidationError (422), nothing stored, no file written
    Store failure:      PersistenceError propagates; the stored image is removed
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Depends
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from feed_backend.config import settings
from feed_backend.exceptions import ValidationError
from feed_backend.models.post import Post
from feed_backend.schemas.post import (
    PostCreate,
    PostCreatedResponse,
    PostListResponse,
    PostResponse,
)
from feed_backend.services.image_service import ImageService, get_image_service
from feed_backend.services.post_store import PostStore, get_post_store

logger = logging.getLogger(__name__)


def field_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    """
    Flatten pydantic errors into the per-field list returned with a 422.

    Each entry: {"type": "field", "value": ..., "msg": ..., "path": ..., "location": "body"}
    """
    errors = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"]) or "body"
        if err["type"] == "value_error":
            # Our own validators: report the ValueError text without pydantic's prefix
            msg = str(err["ctx"]["error"])
        elif err["type"] == "missing":
            msg = f"{path.capitalize()} is required"
        else:
            msg = err["msg"]
        errors.append({
            "type": "field",
            "value": None if err["type"] == "missing" else err.get("input"),
            "msg": msg,
            "path": path,
            "location": "body",
        })
    return errors


class FeedService:
    """
    Business logic for feed posts.

    Dependencies are passed in, never looked up globally, so tests can
    hand in a PostStore over an in-memory database or a mocked session.
    """

    def __init__(self, store: PostStore, images: ImageService):
        self.store = store
        self.images = images

    def validate(self, data: Mapping[str, Any]) -> PostCreate:
        """
        Validate title/content against the configured rules.

        Raises:
            ValidationError: with one entry per failing field
        """
        try:
            return PostCreate.model_validate(
                dict(data),
                context={
                    "title_min_length": settings.title_min_length,
                    "content_min_length": settings.content_min_length,
                },
            )
        except PydanticValidationError as e:
            errors = field_errors(e)
            logger.info("Post validation failed: %s", [err["path"] for err in errors])
            raise ValidationError(errors)

    async def list_posts(self) -> PostListResponse:
        posts = await self.store.list_posts()
        return PostListResponse(
            posts=[PostResponse.model_validate(post) for post in posts],
        )

    async def create_post(
        self,
        data: Mapping[str, Any],
        image: Optional[UploadFile] = None,
    ) -> PostCreatedResponse:
        """
        Create a post from request fields and an optional image upload.

        Args:
            data:  Request fields (title, content); extra keys are ignored
            image: Uploaded file from the multipart body, if any

        Returns:
            PostCreatedResponse with the stored record

        Raises:
            ValidationError:       title/content rejected (store untouched)
            UnsupportedImageError: non-image upload in strict mode
            ImageStorageError:     image could not be written
            PersistenceError:      store failed; nothing was created
        """
        fields = self.validate(data)

        image_url = await self.images.intake(image)

        post = Post(
            title=fields.title,
            content=fields.content,
            image_url=image_url or settings.default_image_url or None,
            creator={"name": settings.default_creator_name},
        )

        try:
            saved = await self.store.add_post(post)
        except Exception:
            # Don't leave an image behind for a post that doesn't exist
            if image_url:
                stored_path = self.images.path_for_url(image_url)
                if stored_path is not None:
                    await self.images.cleanup_file(stored_path)
            raise

        return PostCreatedResponse(
            message="Post created successfully",
            post=PostResponse.model_validate(saved),
        )


def get_feed_service(
    store: PostStore = Depends(get_post_store),
    images: ImageService = Depends(get_image_service),
) -> FeedService:
    """FastAPI dependency wiring the request's store and the image service."""
    return FeedService(store=store, images=images)

