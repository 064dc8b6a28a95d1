"""
Review service: guests review their own bookings, hosts answer reviews of their properties.
"""

from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from homelyhub.database import utcnow
from homelyhub.repositories.booking import BookingRepository
from homelyhub.repositories.property import PropertyRepository
from homelyhub.repositories.review import ReviewRepository
from homelyhub.models.review import Review
from homelyhub.models.user import User
from homelyhub.schemas.review import HostResponseCreate, ReviewCreate
from homelyhub.services.permissions import ensure_can_respond_to_review, require_actor
from homelyhub.utils.exceptions import (
    BookingNotFoundError,
    DuplicateResourceError,
    InsufficientPermissionsError,
    PropertyNotFoundError,
    ReviewNotFoundError,
)
from homelyhub.utils.validators import ValidationUtils
import logging

logger = logging.getLogger(__name__)


class ReviewService:
    """Review rules. One review per booking, enforced by a unique index on booking_id."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.review_repo = ReviewRepository(db_session)
        self.booking_repo = BookingRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def create_review(self, actor: Optional[User], review_data: ReviewCreate) -> Review:
        """
        Review a booking made by the actor.

        Args:
            actor: Authenticated guest
            review_data: Booking id, rating, comment and optional images

        Returns:
            Created review

        Raises:
            UnauthorizedError: If there is no actor
            BookingNotFoundError: If the booking does not exist
            InsufficientPermissionsError: If the booking belongs to another user
            DuplicateResourceError: If the booking already has a review
        """
        actor = require_actor(actor)
        booking_id = ValidationUtils.validate_object_id(review_data.booking_id, "booking id")

        booking = await self.booking_repo.get_by_id(booking_id)
        if not booking:
            raise BookingNotFoundError(booking_id)

        if booking.user_id != actor.id:
            logger.warning(f"User {actor.id} tried to review booking {booking_id} of user {booking.user_id}")
            raise InsufficientPermissionsError("review this booking")

        if await self.review_repo.get_by_booking(booking_id):
            raise DuplicateResourceError("Review for booking", booking_id)

        try:
            review = await self.review_repo.create_review({
                "property_id": booking.property_id,
                "user_id": actor.id,
                "booking_id": booking_id,
                "rating": review_data.rating,
                "comment": review_data.comment,
                "images": [image.model_dump() for image in review_data.images],
                "is_recommended": review_data.is_recommended,
            })
        except IntegrityError:
            # A concurrent submission won the unique index
            raise DuplicateResourceError("Review for booking", booking_id)

        logger.info(f"User {actor.id} reviewed booking {booking_id} with rating {review.rating}")
        return review

    async def respond_to_review(
        self,
        actor: Optional[User],
        review_id: str,
        response_data: HostResponseCreate
    ) -> Review:
        """
        Set the host's answer to a review.

        Raises:
            UnauthorizedError: If there is no actor
            ValidationError: If the id is malformed
            ReviewNotFoundError: If the review does not exist
            InsufficientPermissionsError: If the actor does not host the reviewed property
        """
        actor = require_actor(actor)
        review_id = ValidationUtils.validate_object_id(review_id, "review id")

        review = await self.review_repo.get_by_id(review_id)
        if not review:
            raise ReviewNotFoundError(review_id)

        property_obj = await self.property_repo.get_property(review.property_id, include_deleted=True)
        if not property_obj:
            raise PropertyNotFoundError(review.property_id)

        ensure_can_respond_to_review(actor, property_obj)

        updated = await self.review_repo.update(review_id, {
            "host_response_comment": response_data.comment.strip(),
            "host_responded_at": utcnow(),
        })
        logger.info(f"User {actor.id} responded to review {review_id}")
        return updated
