"""
Audit log repository. Entries are append-only.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc
from realty_portal.repositories.base import BaseRepository
from realty_portal.models.audit_log import AuditLogEntry
from typing import Optional, List, Tuple
import logging

logger = logging.getLogger(__name__)


class AuditLogRepository(BaseRepository[AuditLogEntry]):
    """Repository for audit trail entries."""

    def __init__(self, db: AsyncSession):
        super().__init__(AuditLogEntry, db)

    async def list_entries(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        actor_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[AuditLogEntry], int]:
        """
        Get audit entries newest first, optionally narrowed to an entity or actor.

        Returns:
            Tuple of (entries list, total count)
        """
        try:
            conditions = []
            if entity_type:
                conditions.append(AuditLogEntry.entity_type == entity_type)
            if entity_id is not None:
                conditions.append(AuditLogEntry.entity_id == entity_id)
            if actor_id is not None:
                conditions.append(AuditLogEntry.actor_id == actor_id)

            count_query = select(func.count(AuditLogEntry.id)).where(*conditions)
            total = (await self.db.execute(count_query)).scalar() or 0

            query = (
                select(AuditLogEntry)
                .where(*conditions)
                .order_by(desc(AuditLogEntry.created_at), desc(AuditLogEntry.id))
                .offset(skip)
                .limit(limit)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all()), total
        except Exception as e:
            logger.error(f"Failed to list audit entries: {e}")
            raise
