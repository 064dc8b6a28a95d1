"""
Review model: a guest's rating of a stay.
At most one review exists per booking; the unique index on booking_id enforces it.
"""

from sqlalchemy import String, Integer, Text, Boolean, DateTime, JSON, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from homelyhub.database import Base
from datetime import datetime
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from homelyhub.models.user import User


class Review(Base):
    """Review left by a guest for a completed booking."""

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    property_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    user_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    booking_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="Originating booking; one review per booking"
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    images: Mapped[List[Dict[str, str]]] = mapped_column(JSON, nullable=False, default=list)

    host_response_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    host_responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    is_recommended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    user: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, booking_id={self.booking_id}, rating={self.rating})>"

    def to_dict(self, include_user: bool = False) -> dict:
        """
        Convert review to dictionary.

        Args:
            include_user: Whether to embed the reviewer's name and avatar

        Returns:
            Dictionary representation of review
        """
        host_response = None
        if self.host_response_comment is not None:
            host_response = {
                "comment": self.host_response_comment,
                "responded_at": self.host_responded_at.isoformat() if self.host_responded_at else None,
            }

        result = {
            "id": self.id,
            "property": self.property_id,
            "user": self.user_id,
            "booking": self.booking_id,
            "rating": self.rating,
            "comment": self.comment,
            "images": list(self.images or []),
            "host_response": host_response,
            "is_recommended": self.is_recommended,
            "created_at": self.created_at.isoformat(),
        }

        if include_user and self.user:
            result["user"] = self.user.to_summary("name", "avatar")

        return result
