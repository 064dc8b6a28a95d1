"""
Repository layer for data access operations.
"""

from homelyhub.repositories.base import BaseRepository
from homelyhub.repositories.user import UserRepository
from homelyhub.repositories.property import PropertyRepository
from homelyhub.repositories.booking import BookingRepository
from homelyhub.repositories.review import ReviewRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PropertyRepository",
    "BookingRepository",
    "ReviewRepository",
]
