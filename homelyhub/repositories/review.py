"""
Review repository.
A review insert and the property's rating aggregate are written in the same transaction.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from homelyhub.repositories.base import BaseRepository
from homelyhub.models.review import Review
from homelyhub.models.property import Property
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class ReviewRepository(BaseRepository[Review]):
    """Repository for reviews."""

    def __init__(self, db: AsyncSession):
        super().__init__(Review, db)

    async def get_by_booking(self, booking_id: str) -> Optional[Review]:
        return await self.get_by_field("booking_id", booking_id)

    async def get_for_property(self, property_id: str) -> List[Review]:
        """Reviews of a property, newest first."""
        result = await self.db.execute(
            select(Review)
            .where(Review.property_id == property_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return list(result.scalars().all())

    async def create_review(self, review_data: Dict[str, Any]) -> Review:
        """
        Insert a review and refresh the property's rating average and count.

        Args:
            review_data: Column values for the review

        Returns:
            Created review

        Raises:
            IntegrityError: If the booking already has a review
        """
        try:
            review = Review(**review_data)
            self.db.add(review)
            await self.db.flush()

            await self._refresh_property_rating(review.property_id)
            await self.db.commit()

            logger.info(f"Created review {review.id} for booking {review.booking_id}")
            return await self.get_by_id(review.id)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create review: {e}")
            raise

    async def _refresh_property_rating(self, property_id: str) -> None:
        """Recompute the aggregate from stored reviews so retries converge."""
        stats = await self.db.execute(
            select(func.avg(Review.rating), func.count(Review.id))
            .where(Review.property_id == property_id)
        )
        average, count = stats.one()
        await self.db.execute(
            update(Property)
            .where(Property.id == property_id)
            .values(
                rating_average=round(float(average or 0), 1),
                rating_count=count,
            )
        )
