"""
Pydantic schemas for image uploads.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class UploadedImage(BaseModel):
    """Reference to an uploaded image, ready to attach to a property or avatar."""

    url: str = Field(..., description="Public URL, or an inline data URL when the store was unavailable")
    public_id: str = Field(..., description="Identifier used to delete the image")
    width: Optional[int] = None
    height: Optional[int] = None
    fallback: bool = Field(False, description="True when the image was embedded inline")


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    data: UploadedImage


class DeleteImageRequest(BaseModel):
    public_id: str = Field(..., min_length=1, max_length=255)


class UploadConfig(BaseModel):
    storage_enabled: bool
    max_file_size: int
    allowed_types: List[str]


class UploadConfigResponse(BaseModel):
    success: bool = True
    data: UploadConfig
