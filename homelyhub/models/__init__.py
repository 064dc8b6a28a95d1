"""
Database models for the HomelyHub API.
Includes User, Property, PropertyImage, Booking and Review models.
"""

from homelyhub.models.user import User, UserRole
from homelyhub.models.property import Property, PropertyType, Amenity, PropertyAmenity
from homelyhub.models.image import PropertyImage
from homelyhub.models.booking import Booking, BookingStatus, PaymentStatus
from homelyhub.models.review import Review

# Export all models for easy importing
__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyType",
    "Amenity",
    "PropertyAmenity",
    "PropertyImage",
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "Review",
]
