"""
Feed Backend — Pydantic Request/Response Schemas
==================================================

What:  Pydantic models defining the API contract of the feed routes.
Why:   Field validation is delegated to pydantic; responses are serialized
       with camelCase aliases (imageUrl, createdAt).
How:   PostCreate reads its minimum lengths from the validation context,
       so the rules follow configuration without module-level state.

Design Decision:
    Schemas are separate from SQLAlchemy models because the API contract
    (camelCase, string ids, envelopes) differs from the table layout.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


def _min_length(info: ValidationInfo, key: str, default: int) -> int:
    context = info.context or {}
    return int(context.get(key, default))


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreate(BaseModel):
    """
    Fields accepted by POST /feed/post.

    Both fields are trimmed before the length checks. Validate with
    `PostCreate.model_validate(data, context={"title_min_length": 1,
    "content_min_length": 5})`; FeedService passes the configured values.
    """

    title: str
    content: str

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str, info: ValidationInfo) -> str:
        minimum = _min_length(info, "title_min_length", 1)
        if len(v) < minimum:
            raise ValueError(f"Title must be at least {minimum} characters long")
        return v

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str, info: ValidationInfo) -> str:
        minimum = _min_length(info, "content_min_length", 5)
        if len(v) < minimum:
            raise ValueError(f"Content must be at least {minimum} characters long")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Creator(_CamelModel):
    """Embedded author reference (name only)."""
    name: str


class PostResponse(_CamelModel):
    """A stored post as returned to clients."""
    id: uuid.UUID = Field(description="Identifier assigned by the store")
    title: str
    content: str
    image_url: Optional[str] = Field(default=None, description="Relative image URL")
    creator: Creator
    created_at: datetime = Field(description="Creation time (UTC ISO 8601)")

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive values for timezone-aware columns
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class PostListResponse(_CamelModel):
    """Envelope for GET /feed/posts."""
    posts: List[PostResponse]


class PostCreatedResponse(_CamelModel):
    """Envelope for a successful POST /feed/post (HTTP 201)."""
    message: str = "Post created successfully"
    post: PostResponse


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error envelope for every non-2xx response.

    Example:
        {"message": "connection lost", "data": null}
    """
    message: str
    data: Optional[Any] = None


class ValidationErrorResponse(BaseModel):
    """422 envelope: message plus per-field errors."""
    message: str
    errors: List[Dict[str, Any]]


class HealthResponse(_CamelModel):
    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float
