"""
Public property endpoints: filtered listing search and listing detail.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional
from decimal import Decimal
import math

from realty_portal.config import settings
from realty_portal.models.property import PropertyType
from realty_portal.repositories.property import PropertySearchFilters
from realty_portal.services.property import PropertyService
from realty_portal.schemas.property import (
    PropertyResponse,
    PropertyListResponse,
    PropertySummary
)
from realty_portal.schemas.error import get_error_responses
from realty_portal.utils.dependencies import get_property_service
from realty_portal.utils.exceptions import ValidationError


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get(
    "",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search available properties",
    description="Paginated list of available listings, newest first, with optional filters",
    responses=get_error_responses(422)
)
async def list_properties(
    property_type: Optional[str] = Query(None, description="Property type (sale/rental); 'all' disables the filter"),
    city: Optional[str] = Query(None, description="City (partial, case-insensitive)"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Minimum price"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Maximum price"),
    min_surface: Optional[Decimal] = Query(None, ge=0, description="Minimum surface area"),
    max_surface: Optional[Decimal] = Query(None, ge=0, description="Maximum surface area"),
    search: Optional[str] = Query(None, description="Free text over title, address and city"),
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Properties per page"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Search the public catalogue.

    Only listings with status ``available`` are returned.
    """
    property_type_enum = None
    if property_type and property_type.lower() != "all":
        try:
            property_type_enum = PropertyType(property_type.lower())
        except ValueError:
            raise ValidationError.for_field(
                "property_type",
                f"Invalid property type: {property_type}. Must be 'sale' or 'rental'"
            )

    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError.for_field("min_price", "Minimum price cannot be greater than maximum price")

    if min_surface is not None and max_surface is not None and min_surface > max_surface:
        raise ValidationError.for_field("min_surface", "Minimum surface cannot be greater than maximum surface")

    filters = PropertySearchFilters(
        property_type=property_type_enum,
        city=city.strip() if city else None,
        min_price=min_price,
        max_price=max_price,
        min_surface=min_surface,
        max_surface=max_surface,
        search_text=search.strip() if search else None
    )

    properties, total_count = await property_service.search_properties(filters, page=page, page_size=page_size)

    total_pages = math.ceil(total_count / page_size) if total_count > 0 else 1

    return PropertyListResponse(
        properties=[PropertySummary.model_validate(prop.to_dict()) for prop in properties],
        total=total_count,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property details",
    description="Listing detail with ordered images and the assigned agent's name",
    responses=get_error_responses(404)
)
async def get_property(
    property_id: int = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Raises:
        NotFoundError: If property doesn't exist
    """
    property_obj = await property_service.get_property(property_id)
    return PropertyResponse.model_validate(property_obj.to_dict(include_images=True))
