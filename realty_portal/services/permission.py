"""
Permission evaluation for listing mutations.
Administrators may do anything; agents act only under an approved access request.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from realty_portal.repositories.access_request import AccessRequestRepository
from realty_portal.models.access_request import AccessAction
from realty_portal.models.user import UserRole
from realty_portal.utils.exceptions import InsufficientPermissionsError
import logging

logger = logging.getLogger(__name__)


class PermissionService:
    """
    Decides whether an identity may add, edit or delete listings.

    Checks are read-only and always query the session, so an approval
    committed by another request is visible to the next check.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.request_repo = AccessRequestRepository(db_session)

    async def can_perform(
        self,
        user_id: Optional[int],
        role: Optional[UserRole],
        action: AccessAction,
        property_id: Optional[int] = None
    ) -> bool:
        """
        Check whether a user may perform an action, optionally on one listing.

        Args:
            user_id: Acting user, None when unauthenticated
            role: Acting user's role
            action: add, edit or delete
            property_id: Target listing; None checks for a global grant

        Returns:
            True if allowed, False otherwise
        """
        if user_id is None or role is None:
            return False

        if role == UserRole.ADMIN:
            return True

        if role == UserRole.AGENT:
            allowed = await self.request_repo.has_approved_grant(user_id, action, property_id)
            logger.debug(
                f"Permission check user={user_id} action={action.value} "
                f"property={property_id}: {'allow' if allowed else 'deny'}"
            )
            return allowed

        return False

    async def ensure_can_perform(
        self,
        user_id: Optional[int],
        role: Optional[UserRole],
        action: AccessAction,
        property_id: Optional[int] = None
    ) -> None:
        """
        Raise unless the user may perform the action.

        Raises:
            InsufficientPermissionsError: If no grant covers the action
        """
        if not await self.can_perform(user_id, role, action, property_id):
            target = f"property {property_id}" if property_id is not None else "properties"
            logger.info(f"Denied {action.value} on {target} for user {user_id}")
            raise InsufficientPermissionsError(f"{action.value} {target}")
