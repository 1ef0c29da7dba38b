"""
Agent portal endpoints: assigned listings, own access requests and listing
mutations gated by approved requests.
"""

from fastapi import APIRouter, Depends, status, Path
from typing import List

from realty_portal.models.user import User
from realty_portal.services.property import PropertyService
from realty_portal.services.access_request import AccessRequestService
from realty_portal.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertySummary
)
from realty_portal.schemas.image import ImageReplaceRequest
from realty_portal.schemas.access_request import AccessRequestCreate, AccessRequestResponse
from realty_portal.schemas.error import get_crud_error_responses, get_auth_error_responses
from realty_portal.utils.dependencies import (
    get_current_agent_user,
    get_property_service,
    get_access_request_service
)


router = APIRouter(prefix="/agent", tags=["Agent"])


@router.get(
    "/my-properties",
    response_model=List[PropertySummary],
    summary="List assigned properties",
    responses=get_auth_error_responses()
)
async def list_my_properties(
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertySummary]:
    properties = await property_service.list_agent_properties(current_user.id)
    return [PropertySummary.model_validate(prop.to_dict()) for prop in properties]


@router.get(
    "/requests",
    response_model=List[AccessRequestResponse],
    summary="List my access requests",
    responses=get_auth_error_responses()
)
async def list_my_requests(
    current_user: User = Depends(get_current_agent_user),
    request_service: AccessRequestService = Depends(get_access_request_service)
) -> List[AccessRequestResponse]:
    requests = await request_service.list_for_user(current_user.id)
    return [AccessRequestResponse.model_validate(req.to_dict()) for req in requests]


@router.post(
    "/requests",
    response_model=AccessRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request access",
    description="Ask for add, edit or delete rights on one listing, or on all listings when property_id is omitted",
    responses=get_crud_error_responses()
)
async def create_request(
    request_data: AccessRequestCreate,
    current_user: User = Depends(get_current_agent_user),
    request_service: AccessRequestService = Depends(get_access_request_service)
) -> AccessRequestResponse:
    """
    Raises:
        NotFoundError: If the target listing doesn't exist
        DuplicatePendingRequestError: If the same request is already pending
    """
    access_request = await request_service.create(
        current_user,
        request_data.action,
        request_data.property_id,
        request_data.justification
    )
    return AccessRequestResponse.model_validate(access_request.to_dict())


@router.post(
    "/properties",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    description="Requires an approved global add request",
    responses=get_crud_error_responses()
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.create_property(property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict(include_images=True))


@router.put(
    "/properties/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    description="Requires an approved edit request for this listing or for all listings",
    responses=get_crud_error_responses()
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.update_property(property_id, property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict(include_images=True))


@router.put(
    "/properties/{property_id}/images",
    response_model=PropertyResponse,
    summary="Replace property images",
    description="Requires an approved edit request for this listing or for all listings",
    responses=get_crud_error_responses()
)
async def replace_property_images(
    image_data: ImageReplaceRequest,
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.replace_images(property_id, image_data.images, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict(include_images=True))


@router.delete(
    "/properties/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Requires an approved delete request for this listing or for all listings",
    responses=get_crud_error_responses()
)
async def delete_property(
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.delete_property(property_id, current_user)
