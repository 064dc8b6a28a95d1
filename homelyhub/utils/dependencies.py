"""
FastAPI dependency injection utilities for authentication, services and storage.
Routers resolve the actor here and pass it to services explicitly.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from homelyhub.config import get_settings
from homelyhub.database import get_db
from homelyhub.models.user import User
from homelyhub.services.auth import AuthService
from homelyhub.services.booking import BookingService
from homelyhub.services.image import ImageService, ImageStorage, LocalImageStorage
from homelyhub.services.property import PropertyService
from homelyhub.services.review import ReviewService
from homelyhub.utils.exceptions import UnauthorizedError
import logging

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme; missing tokens are reported by get_current_user
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_property_service(db: AsyncSession = Depends(get_db)) -> PropertyService:
    return PropertyService(db)


async def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    return BookingService(db)


async def get_review_service(db: AsyncSession = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_image_storage() -> ImageStorage:
    """Storage backend for uploads; overridden in tests."""
    settings = get_settings()
    return LocalImageStorage(
        upload_dir=settings.upload_dir,
        url_prefix=settings.media_url_prefix,
        enabled=settings.image_storage_enabled,
    )


def get_image_service(storage: ImageStorage = Depends(get_image_storage)) -> ImageService:
    return ImageService(storage)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no token is provided or the token is invalid or expired
        InactiveUserError: If the user account is inactive
    """
    if not credentials:
        raise UnauthorizedError()

    return await auth_service.get_current_user(credentials.credentials)
