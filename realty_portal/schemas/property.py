"""
Pydantic schemas for property requests and responses.
Handles property CRUD payloads, listing summaries and paginated search results.
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator, field_serializer
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from realty_portal.models.property import PropertyType, PropertyStatus
from realty_portal.schemas.image import PropertyImageResponse


class PropertyBase(BaseModel):
    """Base property schema with common fields."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Property listing title",
        examples=["Bright two-bedroom flat near the harbour"]
    )

    description: Optional[str] = Field(
        None,
        max_length=5000,
        description="Detailed property description"
    )

    property_type: PropertyType = Field(
        ...,
        description="Property type - sale or rental",
        examples=["sale"]
    )

    price: Decimal = Field(
        ...,
        gt=0,
        description="Property price in local currency",
        examples=[1250000]
    )

    surface_area: Optional[Decimal] = Field(
        None,
        ge=0,
        description="Surface area in square metres",
        examples=[85]
    )

    address: Optional[str] = Field(
        None,
        max_length=255,
        description="Street address",
        examples=["12 Rue de la Marine"]
    )

    city: Optional[str] = Field(
        None,
        max_length=120,
        description="City",
        examples=["Casablanca"]
    )

    status: PropertyStatus = Field(
        PropertyStatus.AVAILABLE,
        description="Listing status",
        examples=["available"]
    )

    agent_id: Optional[int] = Field(
        None,
        description="Agent the listing is assigned to"
    )

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Validate and clean title."""
        if not v or not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()

    @field_validator('price')
    @classmethod
    def validate_price(cls, v):
        """Validate price value."""
        if v <= 0:
            raise ValueError("Price must be greater than 0")
        if v > Decimal('9999999999.99'):
            raise ValueError("Price exceeds maximum allowed value")
        return v

    @field_validator('description', 'address', 'city')
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class PropertyCreate(PropertyBase):
    """Schema for creating a new property with its ordered image URLs."""

    images: List[str] = Field(
        default_factory=list,
        description="Ordered image URLs; the first non-blank one becomes primary"
    )


class PropertyUpdate(PropertyBase):
    """
    Schema for updating an existing property.

    Title, type and price are always required. Leaving ``images`` out keeps
    the current images; sending a list (even empty) replaces them.
    """

    images: Optional[List[str]] = Field(
        None,
        description="Replacement image URLs; omit to keep the current set"
    )


class PropertySummary(BaseModel):
    """Schema for listing rows: no gallery, just the cover image."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    property_type: PropertyType
    price: Decimal
    surface_area: Optional[Decimal] = None
    address: Optional[str] = None
    city: Optional[str] = None
    status: PropertyStatus
    agent_id: Optional[int] = None
    agent_name: Optional[str] = Field(None, description="Assigned agent's full name")
    primary_image_url: Optional[str] = Field(None, description="Cover image URL, if any")
    created_at: datetime
    updated_at: datetime

    @field_serializer('price', 'surface_area')
    def serialize_decimal(self, v: Optional[Decimal]) -> Optional[float]:
        return float(v) if v is not None else None


class PropertyResponse(PropertySummary):
    """Schema for property detail including the ordered gallery."""

    images: List[PropertyImageResponse] = Field(
        default_factory=list,
        description="Images, primary first then by display order"
    )


class PropertyListResponse(BaseModel):
    """Schema for paginated property list response."""

    properties: List[PropertySummary] = Field(
        ...,
        description="List of properties"
    )

    total: int = Field(
        ...,
        description="Total number of properties matching the criteria",
        examples=[150]
    )

    page: int = Field(
        ...,
        description="Current page number",
        examples=[1]
    )

    page_size: int = Field(
        ...,
        description="Number of properties per page",
        examples=[20]
    )

    total_pages: int = Field(
        ...,
        description="Total number of pages",
        examples=[8]
    )

    has_next: bool = Field(
        ...,
        description="Whether there are more pages"
    )

    has_previous: bool = Field(
        ...,
        description="Whether there are previous pages"
    )
