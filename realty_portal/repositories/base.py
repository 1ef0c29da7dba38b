"""
Base repository class with common CRUD operations using async SQLAlchemy.
Provides generic database operations that can be extended by specific repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from realty_portal.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.

    Methods taking ``commit`` flush only when it is False, so a service can
    compose several writes into one transaction and commit once.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any], commit: bool = True) -> ModelType:
        """
        Create a new record in the database.

        Args:
            obj_in: Dictionary of field values for the new record
            commit: Commit immediately, or only flush into the open transaction

        Returns:
            Created model instance

        Raises:
            Exception: If database operation fails
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            if commit:
                await self.db.commit()
                await self.db.refresh(db_obj)
            else:
                await self.db.flush()
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: ID of the record to retrieve

        Returns:
            Model instance if found, None otherwise
        """
        try:
            query = select(self.model).where(self.model.id == id)
            result = await self.db.execute(query)
            obj = result.scalar_one_or_none()

            if obj is None:
                logger.debug(f"{self.model.__name__} with id {id} not found")

            return obj
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by id {id}: {e}")
            raise

    async def delete(self, db_obj: ModelType, commit: bool = True) -> None:
        """
        Delete a loaded record, letting ORM cascades remove its children.

        Raises:
            Exception: If database operation fails
        """
        try:
            await self.db.delete(db_obj)
            if commit:
                await self.db.commit()
            else:
                await self.db.flush()
            logger.debug(f"Deleted {self.model.__name__} with id: {db_obj.id}")
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} {db_obj.id}: {e}")
            raise

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """
        Count records with optional filtering.

        Args:
            filters: Dictionary of field filters

        Returns:
            Number of matching records
        """
        try:
            query = select(func.count(self.model.id))

            if filters:
                for field, value in filters.items():
                    if hasattr(self.model, field):
                        query = query.where(getattr(self.model, field) == value)

            result = await self.db.execute(query)
            return result.scalar() or 0
        except Exception as e:
            logger.error(f"Failed to count {self.model.__name__} records: {e}")
            raise

    async def exists(self, id: int) -> bool:
        """
        Check if a record exists by its ID.

        Args:
            id: ID of the record to check

        Returns:
            True if record exists, False otherwise
        """
        try:
            query = select(func.count(self.model.id)).where(self.model.id == id)
            result = await self.db.execute(query)
            return (result.scalar() or 0) > 0
        except Exception as e:
            logger.error(f"Failed to check existence of {self.model.__name__} {id}: {e}")
            raise
