"""
Property repository for listings, search and host views.
Compiles parsed search queries into SQLAlchemy expressions; soft-deleted rows are never returned.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, func
from homelyhub.repositories.base import BaseRepository
from homelyhub.models.property import Property, PropertyAmenity
from homelyhub.models.image import PropertyImage
from homelyhub.database import utcnow
from homelyhub.utils.query_filters import Comparison, FilterOperator, PropertyQuery, SortKey
from typing import Optional, List, Dict, Any, Tuple
import logging

logger = logging.getLogger(__name__)

# Query field name -> mapped column
PROPERTY_COLUMNS = {
    "title": Property.title,
    "type": Property.property_type,
    "price": Property.price,
    "bedrooms": Property.bedrooms,
    "bathrooms": Property.bathrooms,
    "max_guests": Property.max_guests,
    "is_active": Property.is_active,
    "host": Property.host_id,
    "created_at": Property.created_at,
    "location.city": Property.city,
    "location.state": Property.state,
    "location.country": Property.country,
    "location.pincode": Property.pincode,
    "rating.average": Property.rating_average,
    "rating.count": Property.rating_count,
}

CASE_INSENSITIVE_FIELDS = frozenset({
    "title", "location.city", "location.state", "location.country", "location.pincode",
})


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    Images and amenities are child rows replaced as a whole on update.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(
        self,
        property_data: Dict[str, Any],
        images: Optional[List[Dict[str, str]]] = None,
        amenities: Optional[List[Any]] = None
    ) -> Property:
        """
        Create a property together with its images and amenities.

        Args:
            property_data: Column values for the property (host_id included)
            images: Ordered list of {public_id, url}
            amenities: Amenity values

        Returns:
            Created property with relationships loaded

        Raises:
            ValueError: If the property fails model validation
        """
        try:
            property_obj = Property(**property_data)
            property_obj.validate_all()
            property_obj.images = self._build_images(images or [])
            property_obj.set_amenities(amenities or [])

            self.db.add(property_obj)
            await self.db.commit()

            created = await self.get_property(property_obj.id)
            logger.info(f"Created property: {created.title} (ID: {created.id})")
            return created
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create property: {e}")
            raise

    async def get_property(self, property_id: str, include_deleted: bool = False) -> Optional[Property]:
        """
        Get a property by id with images, amenities and host loaded.

        Args:
            property_id: Property identifier
            include_deleted: Whether soft-deleted rows are visible

        Returns:
            Property or None
        """
        try:
            query = (
                select(Property)
                .where(Property.id == property_id)
                .execution_options(populate_existing=True)
            )
            if not include_deleted:
                query = query.where(Property.deleted_at.is_(None))

            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get property {property_id}: {e}")
            raise

    async def update_property(
        self,
        property_obj: Property,
        update_data: Dict[str, Any],
        images: Optional[List[Dict[str, str]]] = None,
        amenities: Optional[List[Any]] = None
    ) -> Property:
        """
        Apply changes to a loaded property.

        Args:
            property_obj: Property to modify
            update_data: Column values to set
            images: Replacement image list, or None to keep the current one
            amenities: Replacement amenity set, or None to keep the current one

        Returns:
            Updated property
        """
        try:
            for field, value in update_data.items():
                setattr(property_obj, field, value)
            if images is not None:
                property_obj.images = self._build_images(images)
            if amenities is not None:
                property_obj.set_amenities(amenities)
            property_obj.validate_all()

            await self.db.commit()
            updated = await self.get_property(property_obj.id)
            logger.debug(f"Updated property with id: {property_obj.id}")
            return updated
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update property {property_obj.id}: {e}")
            raise

    async def soft_delete(self, property_obj: Property) -> None:
        """Mark a property as deleted; bookings keep referencing it."""
        try:
            property_obj.deleted_at = utcnow()
            property_obj.is_active = False
            await self.db.commit()
            logger.info(f"Soft-deleted property {property_obj.id}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete property {property_obj.id}: {e}")
            raise

    async def search(self, query: PropertyQuery) -> Tuple[List[Property], int]:
        """
        Run a parsed search query.

        Args:
            query: Filters, text search, sort and pagination

        Returns:
            Tuple of (page of properties, total matching count)
        """
        try:
            conditions = self._build_filter_conditions(query)

            count_query = select(func.count(Property.id)).where(*conditions)
            total = (await self.db.execute(count_query)).scalar()

            items_query = (
                select(Property)
                .where(*conditions)
                .order_by(*self._build_order_by(query.sort))
                .offset(query.skip)
                .limit(query.limit)
            )
            result = await self.db.execute(items_query)
            properties = list(result.scalars().all())

            logger.debug(f"Search returned {len(properties)} of {total} properties")
            return properties, total
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    async def get_by_host(self, host_id: str) -> List[Property]:
        """All non-deleted properties of a host, newest first."""
        result = await self.db.execute(
            select(Property)
            .where(Property.host_id == host_id, Property.deleted_at.is_(None))
            .order_by(Property.created_at.desc(), Property.id.desc())
        )
        return list(result.scalars().all())

    async def get_ids_by_host(self, host_id: str) -> List[str]:
        result = await self.db.execute(
            select(Property.id).where(Property.host_id == host_id, Property.deleted_at.is_(None))
        )
        return list(result.scalars().all())

    def _build_filter_conditions(self, query: PropertyQuery) -> List:
        """
        Build SQLAlchemy filter conditions from a parsed query.

        Args:
            query: Parsed search query

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = [Property.deleted_at.is_(None)]

        if not query.has_filter("is_active"):
            conditions.append(Property.is_active.is_(True))

        for comparison in query.filters:
            conditions.append(self._compile_comparison(comparison))

        if query.search:
            conditions.append(
                or_(
                    Property.title.icontains(query.search, autoescape=True),
                    Property.city.icontains(query.search, autoescape=True),
                    Property.state.icontains(query.search, autoescape=True),
                )
            )

        return conditions

    @staticmethod
    def _compile_comparison(comparison: Comparison):
        """Translate one comparison node into a SQL expression."""
        op = comparison.operator
        value = comparison.value

        if comparison.field == "amenities":
            if op is FilterOperator.IN:
                return Property.amenity_entries.any(PropertyAmenity.amenity.in_(value))
            return Property.amenity_entries.any(PropertyAmenity.amenity == value)

        column = PROPERTY_COLUMNS[comparison.field]
        if comparison.field in CASE_INSENSITIVE_FIELDS:
            column = func.lower(column)
            value = [v.lower() for v in value] if op is FilterOperator.IN else value.lower()

        if op is FilterOperator.IN:
            return column.in_(value)
        if op is FilterOperator.GT:
            return column > value
        if op is FilterOperator.GTE:
            return column >= value
        if op is FilterOperator.LT:
            return column < value
        if op is FilterOperator.LTE:
            return column <= value
        return column == value

    @staticmethod
    def _build_order_by(sort_keys: List[SortKey]) -> List:
        clauses = []
        for key in sort_keys:
            column = PROPERTY_COLUMNS[key.field]
            clauses.append(column.desc() if key.descending else column.asc())
        # Stable paging across equal sort values
        clauses.append(Property.id.desc())
        return clauses

    @staticmethod
    def _build_images(images: List[Dict[str, str]]) -> List[PropertyImage]:
        return [
            PropertyImage(public_id=image["public_id"], url=image["url"], position=index)
            for index, image in enumerate(images)
        ]
