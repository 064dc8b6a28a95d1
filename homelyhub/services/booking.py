"""
Booking service: reservation workflow plus guest and host booking views.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from homelyhub.config import Settings, get_settings
from homelyhub.repositories.booking import BookingRepository
from homelyhub.repositories.property import PropertyRepository
from homelyhub.models.booking import Booking, BookingStatus, PaymentStatus
from homelyhub.models.property import Property
from homelyhub.models.user import User
from homelyhub.schemas.booking import BookingCreate
from homelyhub.services.permissions import require_actor, ensure_can_view_booking
from homelyhub.services.pricing import normalize_stay_date, quote_stay
from homelyhub.utils.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    PropertyNotFoundError,
    ValidationError,
)
from homelyhub.utils.validators import ValidationUtils
import logging

logger = logging.getLogger(__name__)


class BookingService:
    """
    Booking workflow. Totals are quoted from the property's nightly price at creation
    and never recomputed afterwards.
    """

    def __init__(self, db_session: AsyncSession, settings: Optional[Settings] = None):
        self.db = db_session
        self.booking_repo = BookingRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.settings = settings or get_settings()

    async def create_booking(self, actor: Optional[User], booking_data: BookingCreate) -> Dict[str, Any]:
        """
        Reserve a stay at a property for the actor.

        Args:
            actor: Authenticated guest
            booking_data: Property, dates, guest counts and requests

        Returns:
            Booking view with property summary (title, images, location, price)
            and guest summary (name, email)

        Raises:
            UnauthorizedError: If there is no actor
            PropertyNotFoundError: If the property is missing, deleted or inactive
            ValidationError: If the date range is empty or reversed, or guests exceed capacity
            BookingConflictError: If the stay overlaps a live booking and overlap checks are on
        """
        actor = require_actor(actor)
        property_id = ValidationUtils.validate_object_id(booking_data.property_id, "property id")

        property_obj = await self.property_repo.get_property(property_id)
        if not property_obj or not property_obj.is_active:
            raise PropertyNotFoundError(property_id)

        check_in = normalize_stay_date(booking_data.check_in_date)
        check_out = normalize_stay_date(booking_data.check_out_date)
        quote = quote_stay(check_in, check_out, property_obj.price)

        self._check_capacity(property_obj, booking_data)
        await self._check_availability(property_obj, check_in, check_out)

        booking = await self.booking_repo.create({
            "property_id": property_obj.id,
            "user_id": actor.id,
            "check_in_date": check_in,
            "check_out_date": check_out,
            "adults": booking_data.guests.adults,
            "children": booking_data.guests.children,
            "infants": booking_data.guests.infants,
            "total_amount": quote.total_amount,
            "special_requests": booking_data.special_requests,
            "booking_status": BookingStatus.CONFIRMED,
            "payment_status": PaymentStatus.PENDING,
        })

        logger.info(
            f"Booking {booking.id} created by user {actor.id} for property {property_obj.id}: "
            f"{quote.nights} nights, total {quote.total_amount}"
        )

        result = booking.to_dict()
        result["property"] = property_obj.to_summary("title", "images", "location", "price")
        result["user"] = actor.to_summary("name", "email")
        return result

    async def list_my_bookings(self, actor: Optional[User]) -> List[Dict[str, Any]]:
        """Bookings made by the actor, newest first, with a property summary."""
        actor = require_actor(actor)
        bookings = await self.booking_repo.get_by_user(actor.id)

        results = []
        for booking in bookings:
            item = booking.to_dict()
            item["property"] = booking.property.to_summary("title", "images", "location")
            results.append(item)
        return results

    async def get_booking(self, actor: Optional[User], booking_id: str) -> Dict[str, Any]:
        """
        Get one booking. Only the guest who made it, or an admin, may read it.

        Raises:
            UnauthorizedError: If there is no actor
            ValidationError: If the id is malformed
            BookingNotFoundError: If the booking does not exist
            InsufficientPermissionsError: If the actor is neither the guest nor an admin
        """
        actor = require_actor(actor)
        booking_id = ValidationUtils.validate_object_id(booking_id, "booking id")

        booking = await self.booking_repo.get_by_id(booking_id)
        if not booking:
            raise BookingNotFoundError(booking_id)

        ensure_can_view_booking(actor, booking)

        result = booking.to_dict()
        result["property"] = booking.property.to_dict()
        result["user"] = booking.user.to_summary("name", "email", "phone")
        return result

    async def list_host_bookings(self, actor: Optional[User]) -> List[Dict[str, Any]]:
        """
        Bookings placed on any of the actor's properties, newest first.
        Authorized by property ownership rather than booking ownership.
        """
        actor = require_actor(actor)
        property_ids = await self.property_repo.get_ids_by_host(actor.id)
        bookings = await self.booking_repo.get_by_properties(property_ids)

        results = []
        for booking in bookings:
            item = booking.to_dict()
            item["property"] = booking.property.to_summary("title", "images")
            item["user"] = booking.user.to_summary("name", "email", "phone")
            results.append(item)

        logger.debug(f"Host {actor.id} has {len(results)} bookings across {len(property_ids)} properties")
        return results

    def _check_capacity(self, property_obj: Property, booking_data: BookingCreate) -> None:
        guests = booking_data.guests.adults + booking_data.guests.children
        if guests <= property_obj.max_guests:
            return

        if self.settings.enforce_max_guests:
            raise ValidationError(
                f"This property allows at most {property_obj.max_guests} guests"
            )
        logger.warning(
            f"Booking for property {property_obj.id} has {guests} guests, "
            f"above max_guests={property_obj.max_guests}; not enforced"
        )

    async def _check_availability(self, property_obj: Property, check_in, check_out) -> None:
        overlapping = await self.booking_repo.count_overlapping(property_obj.id, check_in, check_out)
        if not overlapping:
            return

        if self.settings.prevent_double_booking:
            raise BookingConflictError(property_obj.id)
        logger.warning(
            f"Booking for property {property_obj.id} overlaps {overlapping} existing bookings; not enforced"
        )
