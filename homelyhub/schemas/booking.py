"""
Pydantic schemas for booking requests and responses.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional, Union
from datetime import date, datetime, time, timezone
from homelyhub.models.booking import BookingStatus, PaymentStatus
from homelyhub.utils.validators import MAX_INTEGER, ValidationUtils


class GuestCounts(BaseModel):
    adults: int = Field(1, ge=1, le=MAX_INTEGER)
    children: int = Field(0, ge=0, le=MAX_INTEGER)
    infants: int = Field(0, ge=0, le=MAX_INTEGER)


class BookingCreate(BaseModel):
    """
    Booking request. The total amount is always computed server-side,
    so any client-supplied amount is ignored.
    """

    property_id: str = Field(..., description="Property to book", examples=["65a1f0c2e4b0a1b2c3d4e5f6"])
    check_in_date: datetime = Field(..., examples=["2024-01-01"])
    check_out_date: datetime = Field(..., examples=["2024-01-03"])
    guests: GuestCounts = Field(default_factory=GuestCounts)
    special_requests: Optional[str] = Field(None, max_length=500)

    @field_validator("property_id")
    @classmethod
    def validate_property_id(cls, v):
        if not ValidationUtils.is_object_id(v):
            raise ValueError("Invalid property id format")
        return v.lower()

    @field_validator("check_in_date", "check_out_date", mode="before")
    @classmethod
    def accept_plain_dates(cls, v):
        """Calendar dates mean midnight UTC."""
        if isinstance(v, str) and len(v) == 10:
            v = date.fromisoformat(v)
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min, tzinfo=timezone.utc)
        return v


class BookingResponse(BaseModel):
    """
    Booking view. ``property`` and ``user`` are ids or denormalized summaries
    depending on the endpoint.
    """

    id: str
    property: Union[Dict[str, Any], str]
    user: Union[Dict[str, Any], str]
    check_in_date: datetime
    check_out_date: datetime
    guests: GuestCounts
    total_nights: int
    total_amount: float
    payment_status: PaymentStatus
    payment_info: Dict[str, Optional[str]]
    booking_status: BookingStatus
    special_requests: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BookingDetailResponse(BaseModel):
    success: bool = True
    data: BookingResponse


class BookingCreatedResponse(BookingDetailResponse):
    message: str = "Booking created successfully"


class BookingListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[BookingResponse]
