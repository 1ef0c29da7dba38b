"""
Pydantic schemas for access request creation, review and listing.
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime
from realty_portal.models.access_request import AccessAction, RequestStatus


class AccessRequestCreate(BaseModel):
    """Schema for an agent asking for a permission."""

    action: AccessAction = Field(
        ...,
        description="Requested action kind",
        examples=["edit"]
    )

    property_id: Optional[int] = Field(
        None,
        description="Target listing; leave empty to ask for the action on every listing",
        examples=[7]
    )

    justification: str = Field(
        ...,
        max_length=2000,
        description="Why the permission is needed",
        examples=["The owner asked me to update the price after the last visit."]
    )

    @field_validator('justification')
    @classmethod
    def validate_justification(cls, v):
        if not v or not v.strip():
            raise ValueError("Justification cannot be empty")
        return v.strip()


class AccessRequestResolve(BaseModel):
    """Schema for an administrator's decision on a request."""

    status: RequestStatus = Field(
        ...,
        description="approved or rejected",
        examples=["approved"]
    )

    @field_validator('status')
    @classmethod
    def validate_terminal_status(cls, v):
        if not v.is_terminal:
            raise ValueError("Status must be approved or rejected")
        return v


class AccessRequestResponse(BaseModel):
    """Schema for an access request, with requester details on admin views."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    action: AccessAction
    property_id: Optional[int] = Field(None, description="Null for a global request")
    property_title: Optional[str] = None
    justification: str
    status: RequestStatus
    created_at: datetime
    responded_at: Optional[datetime] = None
    requester_name: Optional[str] = None
    requester_email: Optional[str] = None
