"""
Pydantic schemas for reviews and host responses.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from homelyhub.schemas.property import ImageRef
from homelyhub.utils.validators import ValidationUtils


class ReviewCreate(BaseModel):
    """A guest's review of one of their bookings."""

    booking_id: str = Field(..., description="Booking being reviewed")
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=1000)
    images: List[ImageRef] = Field(default_factory=list)
    is_recommended: bool = True

    @field_validator("booking_id")
    @classmethod
    def validate_booking_id(cls, v):
        if not ValidationUtils.is_object_id(v):
            raise ValueError("Invalid booking id format")
        return v.lower()

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v):
        if not v.strip():
            raise ValueError("Comment cannot be empty")
        return v.strip()


class HostResponseCreate(BaseModel):
    comment: str = Field(..., min_length=1, max_length=1000)


class HostResponse(BaseModel):
    comment: str
    responded_at: Optional[datetime] = None


class ReviewResponse(BaseModel):
    id: str
    property: str
    user: Union[Dict[str, Any], str]
    booking: str
    rating: int
    comment: str
    images: List[ImageRef]
    host_response: Optional[HostResponse] = None
    is_recommended: bool
    created_at: datetime


class ReviewDetailResponse(BaseModel):
    success: bool = True
    data: ReviewResponse


class ReviewListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[ReviewResponse]
