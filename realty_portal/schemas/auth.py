"""
Pydantic schemas for authentication requests and responses.
"""

from pydantic import BaseModel, EmailStr, Field, validator
from realty_portal.models.user import UserRole


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["agent@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="User's password"
    )

    @validator('email')
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class CurrentUserResponse(BaseModel):
    """Identity summary returned at login and by /auth/me."""

    id: int = Field(..., description="User's unique identifier")
    email: EmailStr = Field(..., description="User's email address")
    name: str = Field(..., description="User's full name")
    role: UserRole = Field(..., description="User's role")


class LoginResponse(BaseModel):
    """Login response with the signed access token."""

    user: CurrentUserResponse = Field(
        ...,
        description="Authenticated user information"
    )
    access_token: str = Field(
        ...,
        description="JWT access token"
    )
    token_type: str = Field(
        default="bearer",
        description="Token type"
    )
    expires_in: int = Field(
        ...,
        description="Access token lifetime in seconds",
        examples=[604800]
    )
