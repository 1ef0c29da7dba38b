"""
Property service for managing property listings with business logic validation.
Mutations are gated by the permission evaluator, run in a single transaction
and are recorded in the audit trail once committed.
"""

from typing import Optional, List, Dict, Any, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from realty_portal.repositories.property import PropertyRepository, PropertySearchFilters
from realty_portal.repositories.image import ImageRepository, build_images
from realty_portal.repositories.access_request import AccessRequestRepository
from realty_portal.repositories.user import UserRepository
from realty_portal.models.property import Property
from realty_portal.models.access_request import AccessAction
from realty_portal.models.user import User, UserRole
from realty_portal.schemas.property import PropertyCreate, PropertyUpdate
from realty_portal.services.permission import PermissionService
from realty_portal.services.audit import AuditService
from realty_portal.utils.exceptions import (
    APIException,
    NotFoundError,
    ValidationError,
    StorageError
)
import logging

logger = logging.getLogger(__name__)

ENTITY_TYPE = "property"


def normalize_image_urls(urls: Optional[List[str]]) -> List[str]:
    """Strip submitted URLs and drop blank entries, keeping submission order."""
    if not urls:
        return []
    return [url.strip() for url in urls if url and url.strip()]


class PropertyService:
    """
    Property service for managing property listings.
    Handles permission-gated CRUD, atomic image replacement and the public read side.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.image_repo = ImageRepository(db_session)
        self.request_repo = AccessRequestRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.permissions = PermissionService(db_session)
        self.audit = AuditService(db_session)

    async def create_property(self, property_data: PropertyCreate, current_user: User) -> Property:
        """
        Create a new property listing with its ordered images.

        Args:
            property_data: Property creation data
            current_user: User creating the property

        Returns:
            Created property with images and agent loaded

        Raises:
            InsufficientPermissionsError: If the user holds no add grant
            ValidationError: If property data is invalid
            StorageError: If the database write fails
        """
        await self.permissions.ensure_can_perform(current_user.id, current_user.role, AccessAction.ADD)

        create_data = property_data.model_dump(exclude={"images"})
        self._validate_property_fields(create_data)

        try:
            await self._validate_agent_assignment(create_data.get("agent_id"))

            create_data["images"] = build_images(normalize_image_urls(property_data.images))
            property_obj = await self.property_repo.create(create_data, commit=False)
            await self.db.commit()
        except APIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to create property for user {current_user.id}: {e}")
            await self.db.rollback()
            raise StorageError()

        logger.info(f"Property created by {current_user.email}: {property_obj.title} (ID: {property_obj.id})")

        property_id = property_obj.id
        created = await self.property_repo.get_property_with_details(property_id)
        await self.audit.record(
            actor_id=current_user.id,
            action="create",
            entity_type=ENTITY_TYPE,
            entity_id=property_id,
            details={**created.snapshot(), "image_count": len(created.images)}
        )
        return await self.property_repo.get_property_with_details(property_id)

    async def update_property(
        self,
        property_id: int,
        property_data: PropertyUpdate,
        current_user: User
    ) -> Property:
        """
        Update property fields and, when images are supplied, replace the image set.

        Omitting images leaves the current set untouched; an empty list
        removes every image. Either the whole change is committed or none of it.

        Raises:
            InsufficientPermissionsError: If the user holds no edit grant for the listing
            NotFoundError: If property doesn't exist
            ValidationError: If update data is invalid
            StorageError: If the database write fails
        """
        await self.permissions.ensure_can_perform(
            current_user.id, current_user.role, AccessAction.EDIT, property_id
        )

        update_data = property_data.model_dump(exclude={"images"}, exclude_unset=True)
        self._validate_property_fields(update_data)

        try:
            property_obj = await self.property_repo.get_property_with_details(property_id)
            if not property_obj:
                raise NotFoundError("Property", property_id)

            await self._validate_agent_assignment(update_data.get("agent_id"))

            before = property_obj.snapshot()
            for field, value in update_data.items():
                setattr(property_obj, field, value)

            images_replaced = property_data.images is not None
            if images_replaced:
                await self.image_repo.replace_for_property(
                    property_obj, normalize_image_urls(property_data.images)
                )

            await self.db.flush()
            await self.db.commit()
        except APIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to update property {property_id}: {e}")
            await self.db.rollback()
            raise StorageError()

        logger.info(f"Property updated by {current_user.email}: {property_id}")

        updated = await self.property_repo.get_property_with_details(property_id)
        await self.audit.record(
            actor_id=current_user.id,
            action="update",
            entity_type=ENTITY_TYPE,
            entity_id=property_id,
            details={
                "before": before,
                "after": updated.snapshot(),
                "images_replaced": images_replaced
            }
        )
        return await self.property_repo.get_property_with_details(property_id)

    async def replace_images(self, property_id: int, urls: List[str], current_user: User) -> Property:
        """
        Atomically swap the whole image set of a listing.

        Raises:
            InsufficientPermissionsError: If the user holds no edit grant for the listing
            NotFoundError: If property doesn't exist
            StorageError: If the database write fails
        """
        await self.permissions.ensure_can_perform(
            current_user.id, current_user.role, AccessAction.EDIT, property_id
        )

        cleaned_urls = normalize_image_urls(urls)
        try:
            property_obj = await self.property_repo.get_property_with_details(property_id)
            if not property_obj:
                raise NotFoundError("Property", property_id)

            await self.image_repo.replace_for_property(property_obj, cleaned_urls)
            await self.db.commit()
        except APIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to replace images for property {property_id}: {e}")
            await self.db.rollback()
            raise StorageError()

        logger.info(f"Images replaced on property {property_id} by {current_user.email} ({len(cleaned_urls)} images)")

        await self.audit.record(
            actor_id=current_user.id,
            action="replace_images",
            entity_type=ENTITY_TYPE,
            entity_id=property_id,
            details={"image_count": len(cleaned_urls), "primary_image_url": cleaned_urls[0] if cleaned_urls else None}
        )
        return await self.property_repo.get_property_with_details(property_id)

    async def delete_property(self, property_id: int, current_user: User) -> bool:
        """
        Delete a listing together with its images and the access requests scoped to it.

        Returns:
            True if property was deleted

        Raises:
            InsufficientPermissionsError: If the user holds no delete grant for the listing
            NotFoundError: If property doesn't exist
            StorageError: If the database write fails
        """
        await self.permissions.ensure_can_perform(
            current_user.id, current_user.role, AccessAction.DELETE, property_id
        )

        try:
            property_obj = await self.property_repo.get_property_with_details(property_id)
            if not property_obj:
                raise NotFoundError("Property", property_id)

            snapshot = property_obj.snapshot()
            await self.request_repo.delete_for_property(property_id)
            await self.property_repo.delete(property_obj, commit=False)
            await self.db.commit()
        except APIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete property {property_id}: {e}")
            await self.db.rollback()
            raise StorageError()

        logger.info(f"Property deleted by {current_user.email}: {property_id}")

        await self.audit.record(
            actor_id=current_user.id,
            action="delete",
            entity_type=ENTITY_TYPE,
            entity_id=property_id,
            details=snapshot
        )
        return True

    async def get_property(self, property_id: int) -> Property:
        """
        Get property by ID with agent and ordered images.

        Raises:
            NotFoundError: If property doesn't exist
        """
        property_obj = await self.property_repo.get_property_with_details(property_id)
        if not property_obj:
            raise NotFoundError("Property", property_id)
        return property_obj

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Public listing search with pagination.

        Returns:
            Tuple of (properties, total_count)
        """
        skip = (page - 1) * page_size
        return await self.property_repo.search_properties(filters, skip=skip, limit=page_size)

    async def list_all_properties(self) -> List[Property]:
        """Every listing for the admin back office, newest first."""
        return await self.property_repo.list_all()

    async def list_agent_properties(self, agent_id: int) -> List[Property]:
        """Listings assigned to an agent, newest first."""
        return await self.property_repo.get_properties_by_agent(agent_id)

    # Private helper methods for business logic validation

    def _validate_property_fields(self, data: Dict[str, Any]) -> None:
        """Check required fields the schema cannot enforce once it has been bypassed."""
        field_errors = []

        title = data.get("title")
        if not title or not str(title).strip():
            field_errors.append({"field": "title", "message": "Title is required"})

        if data.get("property_type") is None:
            field_errors.append({"field": "property_type", "message": "Property type is required"})

        price = data.get("price")
        if price is None or price <= 0:
            field_errors.append({"field": "price", "message": "Price must be greater than 0"})

        if field_errors:
            raise ValidationError("Invalid property data", field_errors=field_errors)

    async def _validate_agent_assignment(self, agent_id: Optional[int]) -> None:
        """An assigned agent must be an active agent account."""
        if agent_id is None:
            return

        agent = await self.user_repo.get_by_id(agent_id)
        if not agent or agent.role != UserRole.AGENT or not agent.is_active:
            raise ValidationError.for_field("agent_id", f"User {agent_id} is not an active agent")
