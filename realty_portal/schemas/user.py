"""
Pydantic schemas for user responses.
Accounts are provisioned out of band, so there is no public create/update schema.
"""

from pydantic import BaseModel, EmailStr, ConfigDict


class AgentSummary(BaseModel):
    """Agent directory entry used when assigning listings."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: EmailStr
