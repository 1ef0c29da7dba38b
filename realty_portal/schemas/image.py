"""
Pydantic schemas for property image requests and responses.
Images are referenced by URL; the first submitted URL becomes the primary image.
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import List


class PropertyImageResponse(BaseModel):
    """Schema for a stored property image."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Image identifier", examples=[12])

    url: str = Field(
        ...,
        description="Public URL of the image",
        examples=["https://cdn.example.com/listings/12/front.jpg"]
    )

    is_primary: bool = Field(
        ...,
        description="Whether this is the cover image of the property",
        examples=[True]
    )

    display_order: int = Field(
        ...,
        ge=1,
        description="Position in the gallery, starting at 1",
        examples=[1]
    )


class ImageReplaceRequest(BaseModel):
    """Schema for replacing the whole image set of a property."""

    images: List[str] = Field(
        default_factory=list,
        description="Ordered image URLs; blank entries are ignored and the first becomes primary",
        examples=[["https://cdn.example.com/listings/12/front.jpg", "https://cdn.example.com/listings/12/kitchen.jpg"]]
    )
