"""
Feed Backend — Image Intake Service
=====================================

What:  Accepts the optional image of a create-post request and stores it.
Why:   Keeps file system handling out of the feed routes and FeedService.
How:   Filters on the declared MIME type, writes the bytes with aiofiles
       under `<ISO-8601 timestamp>-<original filename>`, and returns the
       relative URL served by the /images static mount.
Who:   Called by FeedService.create_post.

Filter behavior:
    png/jpg/jpeg are accepted. Anything else is dropped and the post is
    created without an image, unless IMAGE_REJECT_UNSUPPORTED is set, in
    which case UnsupportedImageError (415) is raised.

Naming:
    2026-10-18T09:15:02.481Z-photo.png
    The timestamp has millisecond precision; two uploads of the same
    filename within one millisecond overwrite each other.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import quote, unquote

import aiofiles
from starlette.datastructures import UploadFile

from feed_backend.config import settings
from feed_backend.exceptions import ImageStorageError, UnsupportedImageError

logger = logging.getLogger(__name__)

# URL prefix of the static mount, relative (matches stored imageUrl values)
IMAGE_URL_PREFIX = "images"

# Longest single path component most filesystems accept, in bytes
MAX_FILENAME_BYTES = 255


def _truncate_name(name: str, limit: int) -> str:
    """Shorten `name` to at most `limit` UTF-8 bytes, keeping its extension."""
    if len(name.encode()) <= limit:
        return name
    path = PurePosixPath(name)
    suffix = path.suffix if len(path.suffix.encode()) < limit else ""
    stem = name[: len(name) - len(suffix)] if suffix else name
    budget = limit - len(suffix.encode())
    return stem.encode()[:budget].decode(errors="ignore") + suffix


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 timestamp with milliseconds, e.g. 2026-10-18T09:15:02.481Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ImageService:
    """
    Manages acceptance and storage of uploaded post images.

    Directory Structure:
        images/
        ├── 2026-10-18T09:15:02.481Z-photo.png
        └── 2026-10-18T09:16:40.007Z-cat.jpeg
    """

    def __init__(self, images_dir: Optional[str] = None):
        """
        Args:
            images_dir: Override the default directory (used in tests).
                        If None, uses settings.images_dir.
        """
        self.images_dir = Path(images_dir or settings.images_dir).resolve()
        self.images_dir.mkdir(parents=True, exist_ok=True)
        logger.info("ImageService initialized with images_dir=%s", self.images_dir)

    def accepts(self, content_type: Optional[str]) -> bool:
        if not content_type:
            return False
        # Drop parameters such as "; charset=binary"
        mime = content_type.split(";", 1)[0].strip().lower()
        return mime in settings.allowed_image_types

    def build_filename(self, original: str, now: Optional[datetime] = None) -> str:
        """
        Timestamp-prefixed storage name for `original`.

        Directory components are stripped, so names like "../../x.png"
        are stored as "<timestamp>-x.png". Long names are cut down to fit
        MAX_FILENAME_BYTES, keeping the extension.
        """
        prefix = f"{iso_timestamp(now)}-"
        base = PurePosixPath(original.replace("\\", "/")).name or "upload"
        return prefix + _truncate_name(base, MAX_FILENAME_BYTES - len(prefix.encode()))

    async def store_file(self, content: bytes, filename: str) -> str:
        """
        Write `content` under a timestamp-prefixed name.

        Returns:
            The stored filename (relative to images_dir).

        Raises:
            ImageStorageError if the directory or file cannot be written.
        """
        stored_name = self.build_filename(filename)
        path = self.images_dir / stored_name

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", path, e)
            raise ImageStorageError(
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.info("Image stored: %s (%d bytes)", stored_name, len(content))
        return stored_name

    async def intake(self, upload: Optional[UploadFile]) -> Optional[str]:
        """
        Accept and store the uploaded image, if any.

        Returns:
            Relative URL ("images/<stored name>") or None when there was no
            file, the file was empty, or its type was dropped by the filter.
        """
        if upload is None or not upload.filename:
            return None

        if not self.accepts(upload.content_type):
            if settings.image_reject_unsupported:
                raise UnsupportedImageError(upload.content_type, settings.allowed_image_types)
            logger.info(
                "Dropping upload '%s': unsupported content type %s",
                upload.filename,
                upload.content_type,
            )
            return None

        content = await upload.read()
        if not content:
            logger.info("Dropping empty upload '%s'", upload.filename)
            return None

        stored_name = await self.store_file(content, upload.filename)
        # The original name may contain "#", "?" or "%"
        return f"{IMAGE_URL_PREFIX}/{quote(stored_name, safe=':')}"

    def path_for_url(self, image_url: str) -> Optional[Path]:
        """Local path of an imageUrl produced by intake(), or None for other URLs."""
        prefix = f"{IMAGE_URL_PREFIX}/"
        if not image_url.startswith(prefix):
            return None
        return self.images_dir / unquote(image_url[len(prefix):])

    async def cleanup_file(self, file_path: Path) -> None:
        """
        Remove a stored image after the post that referenced it failed to save.

        Best-effort: failures are logged, never raised.
        """
        try:
            if file_path.exists():
                os.remove(file_path)
                logger.info("Cleaned up image: %s", file_path.name)
        except OSError as e:
            logger.warning("Failed to clean up image %s: %s", file_path, e)


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()


def get_image_service() -> ImageService:
    """FastAPI dependency (overridden in tests with a temp directory)."""
    return image_service
