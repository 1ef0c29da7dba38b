"""
Audit recorder for mutating actions.
Writes are best effort: a failed audit write is logged and never undoes or
fails the action it describes.
"""

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from realty_portal.repositories.audit_log import AuditLogRepository
from realty_portal.models.audit_log import AuditLogEntry
import json
import logging

logger = logging.getLogger(__name__)

# Operational audit stream; main.py mirrors it to a file when configured
audit_logger = logging.getLogger("realty_portal.audit")


class AuditService:
    """Append-only audit trail backed by the audit_log table."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.audit_repo = AuditLogRepository(db_session)

    async def record(
        self,
        actor_id: int,
        action: str,
        entity_type: str,
        entity_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> Optional[AuditLogEntry]:
        """
        Append one audit entry and commit it.

        Must be called after the described mutation has committed.

        Args:
            actor_id: User who performed the action
            action: Verb such as create, update, delete or approve_request
            entity_type: Kind of entity acted on
            entity_id: ID of that entity, if any
            details: JSON-serialisable snapshot

        Returns:
            The stored entry, or None if the write failed
        """
        audit_logger.info(
            f"actor={actor_id} action={action} entity={entity_type}:{entity_id} "
            f"details={json.dumps(details, default=str) if details else '{}'}"
        )

        try:
            return await self.audit_repo.create({
                "actor_id": actor_id,
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "details": details
            })
        except Exception as e:
            audit_logger.error(
                f"Failed to persist audit entry actor={actor_id} action={action} "
                f"entity={entity_type}:{entity_id}: {e}"
            )
            return None

    async def list_entries(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        actor_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[AuditLogEntry], int]:
        """Audit entries newest first with total count."""
        return await self.audit_repo.list_entries(
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            skip=skip,
            limit=limit
        )
