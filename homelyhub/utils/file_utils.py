"""
File upload utilities for image validation.
"""

import io
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from PIL import Image, UnidentifiedImageError

from homelyhub.utils.exceptions import (
    FileSizeExceededError,
    UnsupportedFileTypeError,
    ValidationError,
)


class FileValidator:
    """Utility class for uploaded image validation."""

    # Accepted MIME types and their extensions
    SUPPORTED_FORMATS: Dict[str, List[str]] = {
        "image/jpeg": [".jpg", ".jpeg"],
        "image/jpg": [".jpg", ".jpeg"],
        "image/png": [".png"],
        "image/webp": [".webp"],
        "image/gif": [".gif"],
        "image/avif": [".avif"],
        "image/svg+xml": [".svg"],
        "image/bmp": [".bmp"],
        "image/tiff": [".tif", ".tiff"],
    }

    # Formats Pillow can decode, keyed by MIME type
    PIL_FORMATS: Dict[str, List[str]] = {
        "image/jpeg": ["jpeg", "mpo"],
        "image/jpg": ["jpeg", "mpo"],
        "image/png": ["png"],
        "image/webp": ["webp"],
        "image/gif": ["gif"],
        "image/bmp": ["bmp"],
        "image/tiff": ["tiff"],
    }

    MAX_FILE_SIZE = 10 * 1024 * 1024

    @classmethod
    def validate_mime_type(cls, mime_type: Optional[str], allowed: Optional[List[str]] = None) -> str:
        """
        Validate MIME type.

        Args:
            mime_type: Declared content type of the upload
            allowed: Allowed MIME types (defaults to SUPPORTED_FORMATS)

        Returns:
            Validated MIME type

        Raises:
            UnsupportedFileTypeError: If MIME type is not supported
        """
        allowed_types = allowed or list(cls.SUPPORTED_FORMATS)
        if not mime_type or mime_type not in allowed_types:
            raise UnsupportedFileTypeError(mime_type or "unknown", allowed_types)
        return mime_type

    @classmethod
    def validate_file_size(cls, file_size: int, max_size: Optional[int] = None) -> int:
        """
        Validate file size.

        Raises:
            ValidationError: If the file is empty
            FileSizeExceededError: If the file is larger than allowed
        """
        if file_size <= 0:
            raise ValidationError("Please upload a non-empty image file")

        max_allowed = max_size or cls.MAX_FILE_SIZE
        if file_size > max_allowed:
            raise FileSizeExceededError(file_size, max_allowed)

        return file_size

    @classmethod
    def default_extension(cls, mime_type: str, filename: Optional[str] = None) -> str:
        """Extension used for the stored file, preferring the client's when it matches the type."""
        extensions = cls.SUPPORTED_FORMATS.get(mime_type, [""])
        if filename:
            suffix = Path(filename).suffix.lower()
            if suffix in extensions:
                return suffix
        return extensions[0]

    @classmethod
    def inspect_image(cls, content: bytes, mime_type: str) -> Tuple[Optional[int], Optional[int]]:
        """
        Confirm that raster content decodes as the declared type.

        Args:
            content: Raw file bytes
            mime_type: Declared MIME type

        Returns:
            (width, height), or (None, None) for types Pillow does not decode

        Raises:
            ValidationError: If the bytes are not an image of the declared type
        """
        expected_formats = cls.PIL_FORMATS.get(mime_type)
        if expected_formats is None:
            return None, None

        try:
            with Image.open(io.BytesIO(content)) as img:
                pil_format = (img.format or "").lower()
                width, height = img.size
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError(f"Invalid image file: {str(e)}")

        if pil_format not in expected_formats:
            raise ValidationError(f"File content doesn't match declared type {mime_type}")

        return width, height
