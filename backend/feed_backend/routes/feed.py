"""
Feed Backend — Feed Route Handlers
====================================

What:  GET /feed/posts (list) and POST /feed/post (create).
Why:   Entry point for the feed client.
How:   Reads the body (JSON, urlencoded form, or multipart with an optional
       image), delegates to FeedService, returns the JSON envelope.
Who:   Mounted by main.create_app() under /feed.

Request bodies for POST /feed/post:
    application/json:      {"title": "...", "content": "..."}
    multipart/form-data:   title, content, image (optional file)
    Errors are raised, never returned: the app's error translator renders them.
"""

import json
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from feed_backend.config import settings
from feed_backend.exceptions import ValidationError
from feed_backend.schemas.post import (
    ErrorResponse,
    PostCreatedResponse,
    PostListResponse,
    ValidationErrorResponse,
)
from feed_backend.services.feed_service import FeedService, get_feed_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feed", tags=["Feed"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def _body_error(msg: str, value: Any = None) -> ValidationError:
    return ValidationError([
        {"type": "field", "value": value, "msg": msg, "path": "body", "location": "body"},
    ])


async def read_post_payload(request: Request) -> Tuple[Dict[str, Any], Optional[UploadFile]]:
    """
    Extract (fields, image) from the request body.

    Multipart bodies are parsed first so the image upload is available to
    Image Intake; the remaining text fields become the post fields.
    """
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        fields = {key: value for key, value in form.items() if isinstance(value, str)}
        upload = form.get(settings.image_field_name)
        return fields, upload if isinstance(upload, UploadFile) else None

    body = await request.body()
    if not body:
        return {}, None

    try:
        payload = json.loads(body)
    except ValueError:
        raise _body_error("Malformed JSON body")

    if not isinstance(payload, dict):
        raise _body_error("Request body must be a JSON object", value=payload)
    return payload, None


@router.get(
    "/posts",
    response_model=PostListResponse,
    responses={
        200: {"description": "All posts", "model": PostListResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="List all posts",
)
async def get_posts(
    service: FeedService = Depends(get_feed_service),
) -> PostListResponse:
    """Every post, oldest first. No pagination or filtering."""
    return await service.list_posts()


@router.post(
    "/post",
    status_code=201,
    response_model=PostCreatedResponse,
    responses={
        201: {"description": "Post created", "model": PostCreatedResponse},
        415: {"description": "Unsupported image type (strict mode)", "model": ErrorResponse},
        422: {"description": "Invalid title or content", "model": ValidationErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Create a post",
    description=(
        "Create a post from `title` and `content` (JSON, form, or multipart). "
        "A multipart `image` file (PNG or JPEG) is stored and linked as `imageUrl`."
    ),
)
async def create_post(
    request: Request,
    service: FeedService = Depends(get_feed_service),
) -> PostCreatedResponse:
    fields, image = await read_post_payload(request)

    logger.info(
        "Received create-post request: image=%s",
        image.filename if image else None,
    )

    try:
        return await service.create_post(fields, image)
    finally:
        if image is not None:
            await image.close()
