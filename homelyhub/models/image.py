"""
PropertyImage model for images attached to a listing.
Only the opaque reference returned by the image store is kept.
"""

from sqlalchemy import String, Text, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from homelyhub.database import Base


class PropertyImage(Base):
    """Ordered image reference belonging to a property."""

    __tablename__ = "property_images"

    property_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the property this image belongs to"
    )

    public_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Identifier assigned by the image store"
    )

    # Inline fallback uploads are stored as data URLs
    url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="URL (or inline data URL) of the image"
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Display order for image gallery"
    )

    def __repr__(self) -> str:
        """String representation of the property image."""
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, public_id={self.public_id})>"

    def to_dict(self) -> dict:
        return {"public_id": self.public_id, "url": self.url}
