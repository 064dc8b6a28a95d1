"""
Pydantic schemas for user requests and responses.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from homelyhub.models.user import UserRole
from homelyhub.utils.exceptions import ValidationError
from homelyhub.utils.validators import ValidationUtils


def _clean_phone(v: Optional[str]) -> Optional[str]:
    if v is None or not v.strip():
        return None
    try:
        return ValidationUtils.validate_phone_number(v)
    except ValidationError as e:
        raise ValueError(e.detail)


class UserRegister(BaseModel):
    """Schema for registering a new account."""

    name: str = Field(..., min_length=2, max_length=100, description="Display name", examples=["Asha Rao"])
    email: EmailStr = Field(..., description="User's email address", examples=["asha@example.com"])
    password: str = Field(..., min_length=8, max_length=128, description="Password (minimum 8 characters)")
    phone: Optional[str] = Field(None, description="Contact phone number", examples=["+919812345678"])
    role: UserRole = Field(UserRole.GUEST, description="guest or host")
    avatar: Optional[str] = Field(None, description="Avatar URL from the upload endpoint")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return _clean_phone(v)


class UserUpdateDetails(BaseModel):
    """Schema for updating one's own profile. Only provided fields change."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    avatar: Optional[str] = Field(None, description="Avatar URL from the upload endpoint")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip() if v else v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return _clean_phone(v)


class UserResponse(BaseModel):
    """Public profile of a user."""

    id: str
    name: str
    email: EmailStr
    phone: Optional[str] = None
    role: UserRole
    avatar: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserDetailResponse(BaseModel):
    success: bool = True
    data: UserResponse
