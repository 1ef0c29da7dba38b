"""
Pydantic schemas for the audit trail view.
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import datetime


class AuditLogEntryResponse(BaseModel):
    """One recorded action."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    actor_id: int
    action: str = Field(..., examples=["approve_request"])
    entity_type: str = Field(..., examples=["access_request"])
    entity_id: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    entries: List[AuditLogEntryResponse]
    total: int
