"""
API routers for the HomelyHub API.
"""

from .auth import router as auth_router
from .bookings import router as bookings_router
from .properties import router as properties_router
from .reviews import router as reviews_router
from .upload import router as upload_router

__all__ = [
    "auth_router",
    "bookings_router",
    "properties_router",
    "reviews_router",
    "upload_router",
]
