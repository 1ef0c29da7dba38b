"""
Property repository for managing listings with search and filtering.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc
from sqlalchemy.orm import selectinload
from realty_portal.repositories.base import BaseRepository
from realty_portal.models.property import Property, PropertyType, PropertyStatus
from typing import Optional, List, Tuple
from decimal import Decimal
import logging

logger = logging.getLogger(__name__)


class PropertySearchFilters:
    """Data class for property search filters."""

    def __init__(
        self,
        property_type: Optional[PropertyType] = None,
        city: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        min_surface: Optional[Decimal] = None,
        max_surface: Optional[Decimal] = None,
        search_text: Optional[str] = None,
        status: Optional[PropertyStatus] = PropertyStatus.AVAILABLE,
        agent_id: Optional[int] = None
    ):
        self.property_type = property_type
        self.city = city
        self.min_price = min_price
        self.max_price = max_price
        self.min_surface = min_surface
        self.max_surface = max_surface
        self.search_text = search_text
        self.status = status
        self.agent_id = agent_id


class PropertyRepository(BaseRepository[Property]):
    """Repository for listings with filtering and detail loading."""

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def get_property_with_details(self, property_id: int) -> Optional[Property]:
        """
        Get property with its agent and ordered images, refreshed from the database.

        Args:
            property_id: ID of the property

        Returns:
            Property with loaded relationships or None if not found
        """
        try:
            query = (
                select(Property)
                .options(
                    selectinload(Property.agent),
                    selectinload(Property.images)
                )
                .where(Property.id == property_id)
                .execution_options(populate_existing=True)
            )

            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get property with details {property_id}: {e}")
            raise

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Search properties with filtering and pagination, newest first.

        Args:
            filters: PropertySearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return

        Returns:
            Tuple of (properties list, total count)
        """
        try:
            query = select(Property).options(
                selectinload(Property.agent),
                selectinload(Property.images)
            )
            count_query = select(func.count(Property.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar() or 0

            query = (
                query.order_by(desc(Property.created_at), desc(Property.id))
                .offset(skip)
                .limit(limit)
            )

            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
            return list(properties), total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: PropertySearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        if filters.status is not None:
            conditions.append(Property.status == filters.status)

        if filters.property_type:
            conditions.append(Property.property_type == filters.property_type)

        # City filter (case-insensitive partial match)
        if filters.city:
            conditions.append(Property.city.ilike(f"%{filters.city}%"))

        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.min_surface is not None:
            conditions.append(Property.surface_area >= filters.min_surface)
        if filters.max_surface is not None:
            conditions.append(Property.surface_area <= filters.max_surface)

        if filters.agent_id is not None:
            conditions.append(Property.agent_id == filters.agent_id)

        # Free text over title, address and city
        if filters.search_text:
            search_term = f"%{filters.search_text}%"
            conditions.append(
                or_(
                    Property.title.ilike(search_term),
                    Property.address.ilike(search_term),
                    Property.city.ilike(search_term)
                )
            )

        return conditions

    async def list_all(self) -> List[Property]:
        """Every listing regardless of status, newest first (back-office view)."""
        try:
            query = (
                select(Property)
                .options(selectinload(Property.agent), selectinload(Property.images))
                .order_by(desc(Property.created_at), desc(Property.id))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list properties: {e}")
            raise

    async def get_properties_by_agent(self, agent_id: int) -> List[Property]:
        """
        Get listings assigned to a specific agent, newest first.

        Args:
            agent_id: ID of the agent

        Returns:
            List of properties
        """
        try:
            query = (
                select(Property)
                .options(selectinload(Property.images))
                .where(Property.agent_id == agent_id)
                .order_by(desc(Property.created_at), desc(Property.id))
            )
            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Retrieved {len(properties)} properties for agent {agent_id}")
            return list(properties)
        except Exception as e:
            logger.error(f"Failed to get properties by agent {agent_id}: {e}")
            raise
