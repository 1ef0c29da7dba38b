"""
Access request lifecycle: agents ask for add/edit/delete rights, administrators
approve or reject. Approved and rejected are terminal; asking again creates a
new request.
"""

from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from realty_portal.repositories.access_request import AccessRequestRepository
from realty_portal.repositories.property import PropertyRepository
from realty_portal.models.access_request import AccessRequest, AccessAction, RequestStatus
from realty_portal.models.user import User
from realty_portal.services.audit import AuditService
from realty_portal.utils.exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    ForbiddenError,
    InsufficientPermissionsError,
    DuplicatePendingRequestError,
    RequestAlreadyResolvedError,
    StorageError
)
import logging

logger = logging.getLogger(__name__)

ENTITY_TYPE = "access_request"


class AccessRequestService:
    """
    Service for creating, listing and resolving access requests.
    Every state change is recorded in the audit trail after it commits.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.request_repo = AccessRequestRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.audit = AuditService(db_session)

    async def create(
        self,
        user: User,
        action: AccessAction,
        property_id: Optional[int],
        justification: str
    ) -> AccessRequest:
        """
        Raise a new pending access request for an agent.

        Args:
            user: Requesting agent
            action: add, edit or delete
            property_id: Target listing, None for a global request
            justification: Free-text reason, required

        Returns:
            The created pending request

        Raises:
            ForbiddenError: If the user is not an agent
            ValidationError: If the justification is blank
            NotFoundError: If the target listing does not exist
            DuplicatePendingRequestError: If an identical request is already pending
            StorageError: If the database write fails
        """
        if not user.is_agent:
            raise ForbiddenError("Only agents can request access")

        justification = (justification or "").strip()
        if not justification:
            raise ValidationError.for_field("justification", "Justification is required")

        user_id, user_email = user.id, user.email

        try:
            if property_id is not None and not await self.property_repo.exists(property_id):
                raise NotFoundError("Property", property_id)

            duplicate = await self.request_repo.find_pending(user_id, action, property_id)
            if duplicate:
                logger.info(f"Duplicate pending request {duplicate.id} for user {user_id}")
                raise DuplicatePendingRequestError(action.value, property_id)

            access_request = await self.request_repo.create({
                "user_id": user_id,
                "action": action,
                "property_id": property_id,
                "justification": justification,
                "status": RequestStatus.PENDING
            })
        except APIException:
            raise
        except IntegrityError as e:
            await self.db.rollback()
            if "unique" not in str(e.orig).lower():
                logger.error(f"Failed to create access request for user {user_id}: {e}")
                raise StorageError()
            # A concurrent request for the same target won the pending slot
            logger.info(f"Pending request for user {user_id} rejected by unique index")
            raise DuplicatePendingRequestError(action.value, property_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create access request for user {user_id}: {e}")
            await self.db.rollback()
            raise StorageError()

        request_id = access_request.id
        logger.info(
            f"Access request {request_id} created by {user_email}: "
            f"{action.value} on {property_id if property_id is not None else 'all properties'}"
        )

        await self.audit.record(
            actor_id=user_id,
            action="request_access",
            entity_type=ENTITY_TYPE,
            entity_id=request_id,
            details={"action": action.value, "property_id": property_id}
        )

        return await self.request_repo.get_with_details(request_id)

    async def list_for_user(self, user_id: int) -> List[AccessRequest]:
        """Requests raised by one agent, newest first."""
        return await self.request_repo.list_for_user(user_id)

    async def list_all(self, status: Optional[RequestStatus] = None) -> List[AccessRequest]:
        """Every request with requester and target listing, newest first."""
        return await self.request_repo.list_all(status=status)

    async def resolve(
        self,
        request_id: int,
        new_status: RequestStatus,
        admin: User
    ) -> AccessRequest:
        """
        Approve or reject a pending request.

        A request that is already approved or rejected is not changed again.
        The attempt is still written to the audit trail.

        Args:
            request_id: Request to resolve
            new_status: approved or rejected
            admin: Administrator resolving the request

        Returns:
            The resolved request

        Raises:
            InsufficientPermissionsError: If the caller is not an administrator
            ValidationError: If new_status is not terminal
            NotFoundError: If the request does not exist
            RequestAlreadyResolvedError: If the request is no longer pending
            StorageError: If the database write fails
        """
        if not admin.is_admin:
            raise InsufficientPermissionsError("resolve access requests")

        if not new_status.is_terminal:
            raise ValidationError.for_field("status", "Status must be approved or rejected")

        admin_id, admin_email = admin.id, admin.email

        try:
            access_request = await self.request_repo.get_by_id(request_id)
            if not access_request:
                raise NotFoundError("Access request", request_id)

            resolved = False
            if access_request.status == RequestStatus.PENDING:
                resolved = await self.request_repo.mark_resolved(
                    request_id,
                    new_status,
                    responded_by_id=admin_id,
                    responded_at=datetime.now(timezone.utc)
                )

            if resolved:
                await self.db.commit()
        except APIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to resolve access request {request_id}: {e}")
            await self.db.rollback()
            raise StorageError()

        access_request = await self.request_repo.get_with_details(request_id)

        if not resolved:
            current_status = access_request.status.value if access_request else "gone"
            logger.info(
                f"Refused to resolve request {request_id} as {new_status.value}: already {current_status}"
            )
            await self.audit.record(
                actor_id=admin_id,
                action="resolve_refused",
                entity_type=ENTITY_TYPE,
                entity_id=request_id,
                details={"attempted_status": new_status.value, "current_status": current_status}
            )
            raise RequestAlreadyResolvedError(request_id, current_status)

        logger.info(f"Access request {request_id} {new_status.value} by {admin_email}")

        verb = "approve_request" if new_status == RequestStatus.APPROVED else "reject_request"
        await self.audit.record(
            actor_id=admin_id,
            action=verb,
            entity_type=ENTITY_TYPE,
            entity_id=request_id,
            details={
                "user_id": access_request.user_id,
                "action": access_request.action.value,
                "property_id": access_request.property_id
            }
        )

        return await self.request_repo.get_with_details(request_id)
