"""
Booking repository: persistence and lookups for guest and host views.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from homelyhub.repositories.base import BaseRepository
from homelyhub.models.booking import Booking, BookingStatus
from datetime import datetime
from typing import List
import logging

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for bookings. Bookings are never deleted."""

    def __init__(self, db: AsyncSession):
        super().__init__(Booking, db)

    async def get_by_user(self, user_id: str) -> List[Booking]:
        """Bookings made by a guest, newest first."""
        result = await self.db.execute(
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    async def get_by_properties(self, property_ids: List[str]) -> List[Booking]:
        """
        Bookings placed on any of the given properties, newest first.

        Args:
            property_ids: Properties owned by the requesting host

        Returns:
            List of bookings
        """
        if not property_ids:
            return []

        result = await self.db.execute(
            select(Booking)
            .where(Booking.property_id.in_(property_ids))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    async def count_overlapping(self, property_id: str, check_in: datetime, check_out: datetime) -> int:
        """
        Count live bookings on a property whose stay intersects [check_in, check_out).

        Args:
            property_id: Property to inspect
            check_in: Requested arrival
            check_out: Requested departure

        Returns:
            Number of overlapping, non-cancelled bookings
        """
        result = await self.db.execute(
            select(func.count(Booking.id)).where(
                Booking.property_id == property_id,
                Booking.booking_status != BookingStatus.CANCELLED,
                Booking.check_in_date < check_out,
                Booking.check_out_date > check_in,
            )
        )
        overlapping = result.scalar()
        logger.debug(f"Found {overlapping} overlapping bookings for property {property_id}")
        return overlapping
