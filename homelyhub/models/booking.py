"""
Booking model recording a guest's stay at a property.
A booking is an independent fact record: it references a property and a guest and
keeps the price that was quoted when it was created.
"""

from sqlalchemy import (
    String, Integer, Numeric, DateTime, Enum as SQLEnum, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from homelyhub.database import Base
from homelyhub.services.pricing import calculate_nights
from datetime import datetime
from decimal import Decimal
import enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from homelyhub.models.property import Property
    from homelyhub.models.user import User


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(Base):
    """
    Booking model for reserved stays.
    The total amount is a snapshot of nightly price times nights at creation time.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out_date > check_in_date", name="ck_bookings_date_range"),
        CheckConstraint("adults >= 1", name="ck_bookings_adults_min"),
        CheckConstraint("children >= 0", name="ck_bookings_children_min"),
        CheckConstraint("infants >= 0", name="ck_bookings_infants_min"),
        CheckConstraint("total_amount >= 0", name="ck_bookings_total_non_negative"),
    )

    property_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("properties.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Booked property"
    )

    user_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Guest who made the booking"
    )

    check_in_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    check_out_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Guest counts
    adults: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    children: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    infants: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=14, scale=2),
        nullable=False,
        comment="Price snapshot taken at booking time"
    )

    payment_status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING
    )
    payment_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    booking_status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(BookingStatus),
        nullable=False,
        default=BookingStatus.CONFIRMED,
        index=True
    )

    special_requests: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    @property
    def total_nights(self) -> int:
        """Nights stayed, rounding a partial day up."""
        return calculate_nights(self.check_in_date, self.check_out_date)

    @property
    def total_guests(self) -> int:
        return self.adults + self.children

    # Relationships. Keep below the @property methods: `property` shadows the builtin from here on
    property: Mapped["Property"] = relationship("Property", lazy="selectin")
    user: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, property_id={self.property_id}, user_id={self.user_id})>"

    def to_dict(self) -> dict:
        """
        Convert booking to dictionary with bare references.

        Returns:
            Dictionary representation of booking
        """
        return {
            "id": self.id,
            "property": self.property_id,
            "user": self.user_id,
            "check_in_date": self.check_in_date.isoformat(),
            "check_out_date": self.check_out_date.isoformat(),
            "guests": {
                "adults": self.adults,
                "children": self.children,
                "infants": self.infants,
            },
            "total_nights": self.total_nights,
            "total_amount": float(self.total_amount),
            "payment_status": self.payment_status.value,
            "payment_info": {
                "payment_id": self.payment_id,
                "payment_method": self.payment_method,
            },
            "booking_status": self.booking_status.value,
            "special_requests": self.special_requests,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# Overlap lookups for a property's calendar
property_dates_index = Index(
    "idx_bookings_property_dates",
    Booking.property_id,
    Booking.check_in_date,
    Booking.check_out_date
)
