"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import LoginRequest, RefreshTokenRequest, AuthResponse, AccessTokenResponse

# User schemas
from .user import UserRegister, UserUpdateDetails, UserResponse, UserDetailResponse

# Property schemas
from .property import (
    Coordinates,
    Location,
    ImageRef,
    Availability,
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyDetailResponse,
    PropertyListResponse,
    HostPropertyListResponse,
    MessageResponse,
)

# Booking schemas
from .booking import (
    GuestCounts,
    BookingCreate,
    BookingResponse,
    BookingDetailResponse,
    BookingCreatedResponse,
    BookingListResponse,
)

# Review schemas
from .review import ReviewCreate, HostResponseCreate, ReviewResponse, ReviewDetailResponse, ReviewListResponse

# Upload schemas
from .upload import UploadedImage, UploadResponse, DeleteImageRequest, UploadConfig, UploadConfigResponse

# Error schemas
from .error import APIErrorResponse, ErrorInfo, ErrorDetail
