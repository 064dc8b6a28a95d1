"""
Property model for vacation rental listings.
Handles listing data with structured location, pricing, amenities and aggregate rating.
"""

from sqlalchemy import (
    String, Text, Integer, Numeric, Float, Boolean, DateTime, JSON,
    Enum as SQLEnum, Index, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from homelyhub.database import Base
from datetime import datetime
from decimal import Decimal
import enum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from homelyhub.models.user import User
    from homelyhub.models.image import PropertyImage


class PropertyType(str, enum.Enum):
    """Kinds of stay a host can list."""
    APARTMENT = "apartment"
    HOUSE = "house"
    VILLA = "villa"
    COTTAGE = "cottage"
    FARMHOUSE = "farmhouse"
    STUDIO = "studio"


class Amenity(str, enum.Enum):
    """Fixed amenity vocabulary."""
    WIFI = "wifi"
    KITCHEN = "kitchen"
    PARKING = "parking"
    POOL = "pool"
    AC = "ac"
    TV = "tv"
    WASHING_MACHINE = "washingMachine"
    BREAKFAST = "breakfast"
    GYM = "gym"
    HOT_TUB = "hotTub"
    FIREPLACE = "fireplace"
    BALCONY = "balcony"
    GARDEN = "garden"
    BBQ = "bbq"


class PropertyAmenity(Base):
    """Ordered amenity entry of a property."""

    __tablename__ = "property_amenities"

    property_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    amenity: Mapped[Amenity] = mapped_column(
        SQLEnum(Amenity),
        nullable=False,
        index=True
    )

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Property(Base):
    """
    Property model for managing vacation rental listings.
    Owned by exactly one host user; removed by stamping deleted_at.
    """

    __tablename__ = "properties"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_properties_price_non_negative"),
        CheckConstraint("bedrooms >= 1", name="ck_properties_bedrooms_min"),
        CheckConstraint("bathrooms >= 1", name="ck_properties_bathrooms_min"),
        CheckConstraint("max_guests >= 1", name="ck_properties_max_guests_min"),
    )

    title: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Listing description"
    )

    host_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this property"
    )

    # Structured location
    street: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="India")
    pincode: Mapped[str] = mapped_column(String(20), nullable=False)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Nightly rate"
    )

    property_type: Mapped[PropertyType] = mapped_column(
        "type",
        SQLEnum(PropertyType),
        nullable=False,
        index=True
    )

    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False)

    check_in_time: Mapped[str] = mapped_column(String(5), nullable=False, default="14:00")
    check_out_time: Mapped[str] = mapped_column(String(5), nullable=False, default="12:00")

    house_rules: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    availability_start: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    availability_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
        comment="Whether the listing can be booked"
    )

    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True
    )

    # Relationships
    host: Mapped["User"] = relationship("User", lazy="selectin")

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PropertyImage.position"
    )

    amenity_entries: Mapped[List[PropertyAmenity]] = relationship(
        PropertyAmenity,
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=PropertyAmenity.position
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}..., price={self.price})>"

    @property
    def amenities(self) -> List[str]:
        return [entry.amenity.value for entry in self.amenity_entries]

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def set_amenities(self, amenities: List[Amenity]) -> None:
        """Replace the amenity set, dropping duplicates while keeping order."""
        unique = list(dict.fromkeys(Amenity(a) for a in amenities))
        self.amenity_entries = [
            PropertyAmenity(amenity=amenity, position=index)
            for index, amenity in enumerate(unique)
        ]

    def validate_all(self) -> None:
        """
        Run all validation checks on the property.

        Raises:
            ValueError: If any validation fails
        """
        if self.price is None or Decimal(self.price) < 0:
            raise ValueError("Property price cannot be negative")

        for field in ("bedrooms", "bathrooms", "max_guests"):
            if getattr(self, field) is None or getattr(self, field) < 1:
                raise ValueError(f"Property {field} must be at least 1")

        if self.latitude is not None and not (-90 <= self.latitude <= 90):
            raise ValueError("Latitude must be between -90 and 90 degrees")

        if self.longitude is not None and not (-180 <= self.longitude <= 180):
            raise ValueError("Longitude must be between -180 and 180 degrees")

    def location_dict(self) -> dict:
        coordinates = None
        if self.latitude is not None and self.longitude is not None:
            coordinates = {"lat": self.latitude, "lng": self.longitude}

        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "pincode": self.pincode,
            "coordinates": coordinates,
        }

    def to_summary(self, *fields: str) -> dict:
        """
        Denormalized view of the property restricted to the given attributes.

        Args:
            fields: Keys of to_dict() to include besides the id

        Returns:
            Dictionary with the id and the requested attributes
        """
        full = self.to_dict()
        summary = {"id": self.id}
        for field in fields:
            summary[field] = full[field]
        return summary

    def to_dict(self, include_host: bool = False) -> dict:
        """
        Convert property to dictionary.

        Args:
            include_host: Whether to embed the host's public profile

        Returns:
            Dictionary representation of property
        """
        result = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "host": self.host_id,
            "location": self.location_dict(),
            "price": float(self.price),
            "images": [image.to_dict() for image in self.images],
            "amenities": self.amenities,
            "type": self.property_type.value,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "max_guests": self.max_guests,
            "check_in_time": self.check_in_time,
            "check_out_time": self.check_out_time,
            "house_rules": list(self.house_rules or []),
            "availability": {
                "start_date": self.availability_start.isoformat() if self.availability_start else None,
                "end_date": self.availability_end.isoformat() if self.availability_end else None,
            },
            "is_active": self.is_active,
            "rating": {"average": self.rating_average, "count": self.rating_count},
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_host and self.host:
            result["host"] = self.host.to_summary("name", "email", "avatar")

        return result


# Composite indexes for the common search patterns
city_price_index = Index(
    "idx_properties_city_price",
    Property.city,
    Property.price,
    Property.is_active
)

host_active_index = Index(
    "idx_properties_host_active",
    Property.host_id,
    Property.is_active,
    Property.created_at.desc()
)
