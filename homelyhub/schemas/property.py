"""
Pydantic schemas for property requests and responses.
Handles listing creation, updates, search results and host views.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from homelyhub.models.property import Amenity, PropertyType
from homelyhub.utils.validators import MAX_INTEGER, ValidationUtils

# Numeric(12, 2) column limit
MAX_PRICE = Decimal("9999999999.99")


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90, examples=[15.2993])
    lng: float = Field(..., ge=-180, le=180, examples=[74.1240])


class Location(BaseModel):
    """Structured address of a property."""

    street: str = Field(..., min_length=1, max_length=255, examples=["12 Beach Road"])
    city: str = Field(..., min_length=1, max_length=100, examples=["Goa"])
    state: str = Field(..., min_length=1, max_length=100, examples=["Goa"])
    country: str = Field("India", min_length=1, max_length=100)
    pincode: str = Field(..., min_length=1, max_length=20, examples=["403001"])
    coordinates: Optional[Coordinates] = None

    @field_validator("street", "city", "state", "country", "pincode")
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError("Location fields cannot be empty")
        return v.strip()


class ImageRef(BaseModel):
    """Reference returned by the upload endpoint."""

    public_id: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1)


class Availability(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("Availability end date must be after start date")
        return self


class PropertyBase(BaseModel):
    """Fields shared by create and full responses."""

    title: str = Field(..., min_length=1, max_length=100, description="Listing title", examples=["Sea-view villa"])
    description: str = Field(..., min_length=1, max_length=2000, description="Listing description")
    location: Location
    price: Decimal = Field(..., ge=0, le=MAX_PRICE, description="Nightly rate", examples=[4500])
    images: List[ImageRef] = Field(default_factory=list)
    amenities: List[Amenity] = Field(default_factory=list)
    type: PropertyType = Field(..., description="Kind of stay", examples=["villa"])
    bedrooms: int = Field(..., ge=1, le=MAX_INTEGER)
    bathrooms: int = Field(..., ge=1, le=MAX_INTEGER)
    max_guests: int = Field(..., ge=1, le=MAX_INTEGER)
    check_in_time: str = Field("14:00", description="HH:MM")
    check_out_time: str = Field("12:00", description="HH:MM")
    house_rules: List[str] = Field(default_factory=list)
    availability: Optional[Availability] = None
    is_active: bool = True

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()

    @field_validator("check_in_time", "check_out_time")
    @classmethod
    def validate_time(cls, v):
        if not ValidationUtils.TIME_OF_DAY_PATTERN.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v


class PropertyCreate(PropertyBase):
    """Schema for creating a property. The caller becomes the host."""


class PropertyUpdate(BaseModel):
    """
    Schema for updating a property. Only provided fields change.
    Images, amenities and location are replaced as a whole.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    location: Optional[Location] = None
    price: Optional[Decimal] = Field(None, ge=0, le=MAX_PRICE)
    images: Optional[List[ImageRef]] = None
    amenities: Optional[List[Amenity]] = None
    type: Optional[PropertyType] = None
    bedrooms: Optional[int] = Field(None, ge=1, le=MAX_INTEGER)
    bathrooms: Optional[int] = Field(None, ge=1, le=MAX_INTEGER)
    max_guests: Optional[int] = Field(None, ge=1, le=MAX_INTEGER)
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    house_rules: Optional[List[str]] = None
    availability: Optional[Availability] = None
    is_active: Optional[bool] = None

    @field_validator("check_in_time", "check_out_time")
    @classmethod
    def validate_time(cls, v):
        if v is not None and not ValidationUtils.TIME_OF_DAY_PATTERN.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name != "availability":
                raise ValueError(f"{name} cannot be null")
        return self


class LocationResponse(BaseModel):
    street: str
    city: str
    state: str
    country: str
    pincode: str
    coordinates: Optional[Coordinates] = None


class RatingResponse(BaseModel):
    average: float
    count: int


class PropertyResponse(BaseModel):
    """Full property representation."""

    id: str
    title: str
    description: str
    host: Any = Field(..., description="Host id, or a profile summary on detail views")
    location: LocationResponse
    price: float
    images: List[ImageRef]
    amenities: List[Amenity]
    type: PropertyType
    bedrooms: int
    bathrooms: int
    max_guests: int
    check_in_time: str
    check_out_time: str
    house_rules: List[str]
    availability: Dict[str, Optional[str]]
    is_active: bool
    rating: RatingResponse
    created_at: datetime
    updated_at: datetime


class PropertyDetailResponse(BaseModel):
    success: bool = True
    data: PropertyResponse


class PageCursor(BaseModel):
    page: int
    limit: int


class PropertyListResponse(BaseModel):
    """Search results; items honour the requested projection."""

    success: bool = True
    count: int = Field(..., description="Items on this page")
    total: int = Field(..., description="Items matching the filters across all pages")
    pagination: Dict[str, PageCursor] = Field(..., description="next / prev descriptors when they exist")
    data: List[Dict[str, Any]]


class HostPropertyListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[PropertyResponse]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
