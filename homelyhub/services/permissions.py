"""
Authorization policy.

Every check receives the acting user explicitly. Callers load the target resource
first, so a missing resource is reported as not found before any permission check.
"""

from typing import Optional, TYPE_CHECKING
import logging

from homelyhub.models.user import User, UserRole
from homelyhub.utils.exceptions import UnauthorizedError, InactiveUserError, InsufficientPermissionsError

if TYPE_CHECKING:
    from homelyhub.models.booking import Booking
    from homelyhub.models.property import Property

logger = logging.getLogger(__name__)


def require_actor(actor: Optional[User]) -> User:
    """
    Ensure the operation has an authenticated, active actor.

    Args:
        actor: Resolved user or None for anonymous requests

    Returns:
        The actor

    Raises:
        UnauthorizedError: If there is no actor
        InactiveUserError: If the actor's account is disabled
    """
    if actor is None:
        raise UnauthorizedError()
    if not actor.is_active:
        raise InactiveUserError()
    return actor


def is_admin(actor: Optional[User]) -> bool:
    return actor is not None and actor.role == UserRole.ADMIN


def can_modify(actor: Optional[User], owner_id: str) -> bool:
    """Owners and admins may modify a resource."""
    if actor is None:
        return False
    return actor.id == owner_id or is_admin(actor)


def can_view_booking(actor: Optional[User], booking: "Booking") -> bool:
    """Only the guest who made a booking, or an admin, may read it by id."""
    return can_modify(actor, booking.user_id)


def ensure_can_modify_property(actor: User, property_obj: "Property", action: str) -> None:
    """
    Raise unless the actor is the property's host or an admin.

    Args:
        actor: Authenticated user
        property_obj: Property being changed
        action: Verb phrase used in the error message

    Raises:
        InsufficientPermissionsError: If the actor is not entitled
    """
    if not can_modify(actor, property_obj.host_id):
        logger.warning(f"User {actor.id} denied to {action} property {property_obj.id}")
        raise InsufficientPermissionsError(f"{action} this property")


def ensure_can_view_booking(actor: User, booking: "Booking") -> None:
    if not can_view_booking(actor, booking):
        logger.warning(f"User {actor.id} denied access to booking {booking.id}")
        raise InsufficientPermissionsError("access this booking")


def can_respond_to_review(actor: Optional[User], property_obj: "Property") -> bool:
    """Only the reviewed property's host, or an admin, may answer a review."""
    return can_modify(actor, property_obj.host_id)


def ensure_can_respond_to_review(actor: User, property_obj: "Property") -> None:
    if not can_respond_to_review(actor, property_obj):
        raise InsufficientPermissionsError("respond to this review")
