"""
Property service for managing listings with ownership checks.
Handles CRUD operations, host views and search over the closed filter grammar.
"""

from typing import Optional, List, Dict, Any, Iterable, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from homelyhub.config import get_settings
from homelyhub.repositories.property import PropertyRepository
from homelyhub.repositories.review import ReviewRepository
from homelyhub.models.property import Property
from homelyhub.models.review import Review
from homelyhub.models.user import User
from homelyhub.schemas.property import Location, PropertyCreate, PropertyUpdate
from homelyhub.services.permissions import require_actor, ensure_can_modify_property
from homelyhub.utils.exceptions import PropertyNotFoundError, ValidationError
from homelyhub.utils.query_filters import build_pagination, parse_property_query, project
from homelyhub.utils.validators import ValidationUtils
import logging

logger = logging.getLogger(__name__)


def _location_columns(location: Location) -> Dict[str, Any]:
    coordinates = location.coordinates
    return {
        "street": location.street,
        "city": location.city,
        "state": location.state,
        "country": location.country,
        "pincode": location.pincode,
        "latitude": coordinates.lat if coordinates else None,
        "longitude": coordinates.lng if coordinates else None,
    }


class PropertyService:
    """
    Property service holding the listing business rules.
    The acting user is passed explicitly to every operation that needs one.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.review_repo = ReviewRepository(db_session)
        self.settings = get_settings()

    async def create_property(self, actor: Optional[User], property_data: PropertyCreate) -> Property:
        """
        Create a listing owned by the actor.

        Args:
            actor: Authenticated user; becomes the host of record
            property_data: Listing payload

        Returns:
            Created property

        Raises:
            UnauthorizedError: If there is no actor
            ValidationError: If the listing violates model rules
        """
        actor = require_actor(actor)

        create_data = property_data.model_dump(
            exclude={"location", "images", "amenities", "type", "availability"}
        )
        create_data.update(_location_columns(property_data.location))
        create_data["property_type"] = property_data.type
        create_data["host_id"] = actor.id
        if property_data.availability:
            create_data["availability_start"] = property_data.availability.start_date
            create_data["availability_end"] = property_data.availability.end_date

        try:
            property_obj = await self.property_repo.create_property(
                create_data,
                images=[image.model_dump() for image in property_data.images],
                amenities=property_data.amenities,
            )
        except ValueError as e:
            raise ValidationError(str(e))

        logger.info(f"Property created by user {actor.email}: {property_obj.title} (ID: {property_obj.id})")
        return property_obj

    async def get_property(self, property_id: str) -> Property:
        """
        Get a non-deleted property by id.

        Raises:
            ValidationError: If the id is malformed
            PropertyNotFoundError: If the property does not exist
        """
        property_id = ValidationUtils.validate_object_id(property_id, "property id")

        property_obj = await self.property_repo.get_property(property_id)
        if not property_obj:
            raise PropertyNotFoundError(property_id)

        logger.debug(f"Retrieved property: {property_id}")
        return property_obj

    async def update_property(
        self,
        actor: Optional[User],
        property_id: str,
        property_data: PropertyUpdate
    ) -> Property:
        """
        Update a property owned by the actor (or any property, for admins).

        Args:
            actor: Authenticated user
            property_id: Property to update
            property_data: Fields to change

        Returns:
            Updated property

        Raises:
            UnauthorizedError: If there is no actor
            ValidationError: If the id or payload is invalid
            PropertyNotFoundError: If the property does not exist
            InsufficientPermissionsError: If the actor is neither host nor admin
        """
        actor = require_actor(actor)
        property_obj = await self.get_property(property_id)
        ensure_can_modify_property(actor, property_obj, "update")

        changes = property_data.model_dump(
            exclude_unset=True,
            exclude={"location", "images", "amenities", "type", "availability"}
        )
        fields_set = property_data.model_fields_set

        if "location" in fields_set:
            changes.update(_location_columns(property_data.location))
        if "type" in fields_set:
            changes["property_type"] = property_data.type
        if "availability" in fields_set:
            availability = property_data.availability
            changes["availability_start"] = availability.start_date if availability else None
            changes["availability_end"] = availability.end_date if availability else None

        images = None
        if "images" in fields_set:
            images = [image.model_dump() for image in property_data.images]

        try:
            updated = await self.property_repo.update_property(
                property_obj,
                changes,
                images=images,
                amenities=property_data.amenities if "amenities" in fields_set else None,
            )
        except ValueError as e:
            raise ValidationError(str(e))

        logger.info(f"Property {property_id} updated by user {actor.email}")
        return updated

    async def delete_property(self, actor: Optional[User], property_id: str) -> None:
        """
        Soft-delete a property. Existing bookings keep their reference.

        Raises:
            UnauthorizedError: If there is no actor
            ValidationError: If the id is malformed
            PropertyNotFoundError: If the property does not exist
            InsufficientPermissionsError: If the actor is neither host nor admin
        """
        actor = require_actor(actor)
        property_obj = await self.get_property(property_id)
        ensure_can_modify_property(actor, property_obj, "delete")

        await self.property_repo.soft_delete(property_obj)
        logger.info(f"Property {property_id} deleted by user {actor.email}")

    async def search_properties(
        self,
        params: Iterable[Tuple[str, str]]
    ) -> Tuple[List[Dict[str, Any]], int, Dict[str, Dict[str, int]]]:
        """
        Search listings from raw query parameters.

        Args:
            params: Query string pairs in request order

        Returns:
            Tuple of (projected items, total matching count, pagination descriptors)

        Raises:
            ValidationError: If a filter, sort, select or paging parameter is malformed
        """
        query = parse_property_query(
            params,
            default_limit=self.settings.default_page_size,
            max_limit=self.settings.max_page_size,
        )

        properties, total = await self.property_repo.search(query)
        logger.debug(f"Search matched {total} properties (page {query.page}, limit {query.limit})")

        items = []
        for property_obj in properties:
            document = property_obj.to_dict()
            document["host"] = property_obj.host.to_summary("name", "avatar")
            items.append(project(document, query.select))
        pagination = build_pagination(query.page, query.limit, total)
        return items, total, pagination

    async def list_host_properties(self, actor: Optional[User]) -> List[Property]:
        """The actor's listings, including inactive ones."""
        actor = require_actor(actor)
        return await self.property_repo.get_by_host(actor.id)

    async def list_property_reviews(self, property_id: str) -> List[Review]:
        property_obj = await self.get_property(property_id)
        return await self.review_repo.get_for_property(property_obj.id)
