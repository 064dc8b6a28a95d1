"""
Image upload service.

Stores images through an ImageStorage backend. When the backend cannot be reached
the upload degrades to an inline base64 data URL instead of failing the request.
"""

import base64
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from bson import ObjectId

from homelyhub.config import Settings, get_settings
from homelyhub.models.user import User
from homelyhub.schemas.upload import UploadConfig, UploadedImage
from homelyhub.services.permissions import require_actor
from homelyhub.utils.exceptions import UpstreamFailureError, ValidationError
from homelyhub.utils.file_utils import FileValidator

logger = logging.getLogger(__name__)

INLINE_PREFIX = "local_"
PUBLIC_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")


@dataclass(frozen=True)
class StoredImage:
    url: str
    public_id: str


class StorageUnavailableError(Exception):
    """Raised by a storage backend that cannot accept or remove files."""


class ImageStorage:
    """Interface of an image store: upload bytes, delete by public id."""

    async def upload(self, content: bytes, filename: str, mime_type: str) -> StoredImage:
        raise NotImplementedError

    async def delete(self, public_id: str) -> None:
        raise NotImplementedError


class LocalImageStorage(ImageStorage):
    """
    Stores images on disk under the upload directory and serves them
    from the media URL prefix.
    """

    def __init__(self, upload_dir: str, url_prefix: str, enabled: bool = True):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.enabled = enabled

    async def upload(self, content: bytes, filename: str, mime_type: str) -> StoredImage:
        if not self.enabled:
            raise StorageUnavailableError("Image storage is disabled")

        public_id = f"{ObjectId()}{FileValidator.default_extension(mime_type, filename)}"
        file_path = self.upload_dir / public_id

        try:
            await aiofiles.os.makedirs(self.upload_dir, exist_ok=True)
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            if file_path.exists():
                file_path.unlink()
            raise StorageUnavailableError(f"Failed to write {file_path}: {e}")

        return StoredImage(url=f"{self.url_prefix}/{public_id}", public_id=public_id)

    async def delete(self, public_id: str) -> None:
        if not self.enabled:
            raise StorageUnavailableError("Image storage is disabled")

        file_path = self.upload_dir / public_id
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            logger.info(f"Image {public_id} already removed from storage")
        except OSError as e:
            raise StorageUnavailableError(f"Failed to remove {file_path}: {e}")


def inline_data_url(content: bytes, mime_type: str) -> str:
    """Embed image bytes as a data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


def inline_public_id(filename: str) -> str:
    """Public id for an inline image; the prefix marks it as never stored."""
    safe_name = re.sub(r"[^A-Za-z0-9_.\-]", "_", filename or "image")
    return f"{INLINE_PREFIX}{int(time.time() * 1000)}_{safe_name}"


class ImageService:
    """Validates uploads and hands them to the configured storage backend."""

    def __init__(self, storage: ImageStorage, settings: Optional[Settings] = None):
        self.storage = storage
        self.settings = settings or get_settings()

    def get_upload_config(self) -> UploadConfig:
        return UploadConfig(
            storage_enabled=self.settings.image_storage_enabled,
            max_file_size=self.settings.max_file_size,
            allowed_types=list(self.settings.allowed_file_types),
        )

    async def upload_image(
        self,
        actor: Optional[User],
        content: bytes,
        filename: Optional[str],
        mime_type: Optional[str]
    ) -> UploadedImage:
        """
        Validate and store an image.

        Args:
            actor: Authenticated user
            content: Raw file bytes
            filename: Client file name
            mime_type: Declared content type

        Returns:
            Uploaded image reference; ``fallback`` is set when it was embedded inline

        Raises:
            UnauthorizedError: If there is no actor
            ValidationError: If the file is empty, too large, or not an accepted image
        """
        actor = require_actor(actor)
        mime_type = FileValidator.validate_mime_type(mime_type, self.settings.allowed_file_types)
        FileValidator.validate_file_size(len(content), self.settings.max_file_size)
        width, height = FileValidator.inspect_image(content, mime_type)
        filename = filename or "image"

        try:
            stored = await self.storage.upload(content, filename, mime_type)
        except StorageUnavailableError as e:
            logger.warning(f"Image storage unavailable, embedding {filename} inline for user {actor.id}: {e}")
            return UploadedImage(
                url=inline_data_url(content, mime_type),
                public_id=inline_public_id(filename),
                width=width,
                height=height,
                fallback=True,
            )

        logger.info(f"User {actor.id} uploaded image {stored.public_id} ({len(content)} bytes)")
        return UploadedImage(url=stored.url, public_id=stored.public_id, width=width, height=height)

    async def delete_image(self, actor: Optional[User], public_id: str) -> bool:
        """
        Remove an image from storage.

        Args:
            actor: Authenticated user
            public_id: Identifier returned by upload

        Returns:
            True if the store was asked to delete, False for inline images

        Raises:
            UpstreamFailureError: If the store cannot delete the image
        """
        actor = require_actor(actor)

        if public_id.startswith(INLINE_PREFIX):
            logger.debug(f"Skipping delete of inline image {public_id}")
            return False

        if not PUBLIC_ID_PATTERN.match(public_id) or public_id in (".", ".."):
            raise ValidationError(f"Invalid public_id: {public_id}")

        try:
            await self.storage.delete(public_id)
        except StorageUnavailableError as e:
            logger.error(f"Failed to delete image {public_id}: {e}")
            raise UpstreamFailureError("Image storage is unavailable")

        logger.info(f"User {actor.id} deleted image {public_id}")
        return True
