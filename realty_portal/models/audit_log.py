"""
Append-only audit trail of mutating actions.
Rows are written once and never updated or deleted by the application.
"""

from sqlalchemy import String, Integer, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
from realty_portal.database import Base
from typing import Any, Dict, Optional


class AuditLogEntry(Base):
    """One recorded action: who did what to which entity."""

    __tablename__ = "audit_log"

    # Plain integers: the trail outlives the rows it describes
    actor_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="User who performed the action"
    )

    action: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Action verb, e.g. create, update, delete, approve_request"
    )

    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Kind of entity the action applied to"
    )

    entity_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="ID of the entity, when there is one"
    )

    details: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
        comment="Snapshot of the relevant fields"
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLogEntry(id={self.id}, actor_id={self.actor_id}, action={self.action}, "
            f"entity={self.entity_type}:{self.entity_id})>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "actor_id": self.actor_id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "details": self.details,
            "created_at": self.created_at,
        }


entity_lookup_index = Index(
    'idx_audit_log_entity',
    AuditLogEntry.entity_type,
    AuditLogEntry.entity_id
)
