"""
Admin back-office endpoints: listing CRUD, agent directory, access request
review and the audit trail. Every route requires an administrator token.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import List, Optional

from realty_portal.models.user import User
from realty_portal.models.access_request import RequestStatus
from realty_portal.services.property import PropertyService
from realty_portal.services.access_request import AccessRequestService
from realty_portal.services.audit import AuditService
from realty_portal.services.user import UserService
from realty_portal.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertySummary
)
from realty_portal.schemas.image import ImageReplaceRequest
from realty_portal.schemas.user import AgentSummary
from realty_portal.schemas.access_request import AccessRequestResolve, AccessRequestResponse
from realty_portal.schemas.audit import AuditLogEntryResponse, AuditLogListResponse
from realty_portal.schemas.error import get_crud_error_responses, get_auth_error_responses
from realty_portal.utils.dependencies import (
    get_current_admin_user,
    get_property_service,
    get_access_request_service,
    get_audit_service,
    get_user_service
)


router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/properties",
    response_model=List[PropertySummary],
    summary="List all properties",
    description="Every listing regardless of status, newest first",
    responses=get_auth_error_responses()
)
async def list_all_properties(
    current_user: User = Depends(get_current_admin_user),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertySummary]:
    properties = await property_service.list_all_properties()
    return [PropertySummary.model_validate(prop.to_dict()) for prop in properties]


@router.post(
    "/properties",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    responses=get_crud_error_responses()
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_admin_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Create a listing with its ordered images. The first image becomes primary.
    """
    property_obj = await property_service.create_property(property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict(include_images=True))


@router.put(
    "/properties/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    responses=get_crud_error_responses()
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_admin_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.update_property(property_id, property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict(include_images=True))


@router.put(
    "/properties/{property_id}/images",
    response_model=PropertyResponse,
    summary="Replace property images",
    responses=get_crud_error_responses()
)
async def replace_property_images(
    image_data: ImageReplaceRequest,
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_admin_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.replace_images(property_id, image_data.images, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict(include_images=True))


@router.delete(
    "/properties/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    responses=get_crud_error_responses()
)
async def delete_property(
    property_id: int = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_admin_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    """Delete a listing with its images and the access requests scoped to it."""
    await property_service.delete_property(property_id, current_user)


@router.get(
    "/agents",
    response_model=List[AgentSummary],
    summary="List active agents",
    responses=get_auth_error_responses()
)
async def list_agents(
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> List[AgentSummary]:
    agents = await user_service.list_active_agents()
    return [AgentSummary.model_validate(agent) for agent in agents]


@router.get(
    "/requests",
    response_model=List[AccessRequestResponse],
    summary="List access requests",
    description="All agents' requests with requester and target listing, newest first",
    responses=get_auth_error_responses()
)
async def list_access_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status", description="Only requests in this status"),
    current_user: User = Depends(get_current_admin_user),
    request_service: AccessRequestService = Depends(get_access_request_service)
) -> List[AccessRequestResponse]:
    requests = await request_service.list_all(status=status_filter)
    return [AccessRequestResponse.model_validate(req.to_dict(include_requester=True)) for req in requests]


@router.put(
    "/requests/{request_id}",
    response_model=AccessRequestResponse,
    summary="Resolve access request",
    description="Approve or reject a pending request. Resolved requests cannot be changed.",
    responses=get_crud_error_responses()
)
async def resolve_access_request(
    resolve_data: AccessRequestResolve,
    request_id: int = Path(..., description="Access request ID"),
    current_user: User = Depends(get_current_admin_user),
    request_service: AccessRequestService = Depends(get_access_request_service)
) -> AccessRequestResponse:
    """
    Raises:
        NotFoundError: If the request doesn't exist
        RequestAlreadyResolvedError: If it was already approved or rejected
    """
    access_request = await request_service.resolve(request_id, resolve_data.status, current_user)
    return AccessRequestResponse.model_validate(access_request.to_dict(include_requester=True))


@router.get(
    "/audit-log",
    response_model=AuditLogListResponse,
    summary="List audit entries",
    responses=get_auth_error_responses()
)
async def list_audit_entries(
    entity_type: Optional[str] = Query(None, description="Entity kind, e.g. property or access_request"),
    entity_id: Optional[int] = Query(None, description="Entity ID"),
    actor_id: Optional[int] = Query(None, description="User who performed the action"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_admin_user),
    audit_service: AuditService = Depends(get_audit_service)
) -> AuditLogListResponse:
    entries, total = await audit_service.list_entries(
        entity_type=entity_type,
        entity_id=entity_id,
        actor_id=actor_id,
        skip=skip,
        limit=limit
    )
    return AuditLogListResponse(
        entries=[AuditLogEntryResponse.model_validate(entry) for entry in entries],
        total=total
    )
