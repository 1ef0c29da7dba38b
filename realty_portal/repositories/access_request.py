"""
Access request repository for the agent permission workflow.
Holds the grant lookup used by every authorization check.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_, or_, func, desc
from sqlalchemy.orm import selectinload
from realty_portal.repositories.base import BaseRepository
from realty_portal.models.access_request import AccessRequest, AccessAction, RequestStatus
from datetime import datetime
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class AccessRequestRepository(BaseRepository[AccessRequest]):
    """Repository for access requests and permission grant lookups."""

    def __init__(self, db: AsyncSession):
        super().__init__(AccessRequest, db)

    @staticmethod
    def _same_target(property_id: Optional[int]):
        # A null target only matches another null target
        if property_id is None:
            return AccessRequest.property_id.is_(None)
        return AccessRequest.property_id == property_id

    async def find_pending(
        self,
        user_id: int,
        action: AccessAction,
        property_id: Optional[int]
    ) -> Optional[AccessRequest]:
        """
        Find a pending request with exactly the same user, action and target.

        Args:
            user_id: Requesting agent
            action: Requested action
            property_id: Target listing, None for a global request

        Returns:
            The pending request if one exists, None otherwise
        """
        try:
            query = (
                select(AccessRequest)
                .where(
                    AccessRequest.user_id == user_id,
                    AccessRequest.action == action,
                    AccessRequest.status == RequestStatus.PENDING,
                    self._same_target(property_id)
                )
                .limit(1)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to look up pending request for user {user_id}: {e}")
            raise

    async def has_approved_grant(
        self,
        user_id: int,
        action: AccessAction,
        property_id: Optional[int] = None
    ) -> bool:
        """
        Check whether an approved request covers the action.

        An approved global request covers every listing. A property-scoped
        approval only covers its own listing. Without a target only global
        grants count.
        """
        try:
            target_condition = AccessRequest.property_id.is_(None)
            if property_id is not None:
                target_condition = or_(
                    AccessRequest.property_id.is_(None),
                    AccessRequest.property_id == property_id
                )

            query = select(func.count(AccessRequest.id)).where(
                and_(
                    AccessRequest.user_id == user_id,
                    AccessRequest.action == action,
                    AccessRequest.status == RequestStatus.APPROVED,
                    target_condition
                )
            )
            result = await self.db.execute(query)
            return (result.scalar() or 0) > 0
        except Exception as e:
            logger.error(f"Failed to check grant for user {user_id}, action {action.value}: {e}")
            raise

    async def get_with_details(self, request_id: int) -> Optional[AccessRequest]:
        """Load a request with requester and target listing, bypassing stale identity-map state."""
        query = (
            select(AccessRequest)
            .options(selectinload(AccessRequest.user), selectinload(AccessRequest.property_rel))
            .where(AccessRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> List[AccessRequest]:
        """
        Get all requests raised by one agent, newest first.

        Args:
            user_id: ID of the agent

        Returns:
            List of access requests with target listing loaded
        """
        try:
            query = (
                select(AccessRequest)
                .options(selectinload(AccessRequest.property_rel))
                .where(AccessRequest.user_id == user_id)
                .order_by(desc(AccessRequest.created_at), desc(AccessRequest.id))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list access requests for user {user_id}: {e}")
            raise

    async def list_all(self, status: Optional[RequestStatus] = None) -> List[AccessRequest]:
        """
        Get every request across agents, newest first.

        Args:
            status: Optional status filter

        Returns:
            List of access requests with requester and target listing loaded
        """
        try:
            query = select(AccessRequest).options(
                selectinload(AccessRequest.user),
                selectinload(AccessRequest.property_rel)
            )
            if status is not None:
                query = query.where(AccessRequest.status == status)

            query = query.order_by(desc(AccessRequest.created_at), desc(AccessRequest.id))
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list access requests: {e}")
            raise

    async def mark_resolved(
        self,
        request_id: int,
        new_status: RequestStatus,
        responded_by_id: int,
        responded_at: datetime
    ) -> bool:
        """
        Move a pending request to a terminal status.

        The update only matches rows still pending, so of two concurrent
        resolutions exactly one succeeds. Nothing is committed here.

        Returns:
            True if the request was pending and is now resolved
        """
        stmt = (
            update(AccessRequest)
            .where(
                AccessRequest.id == request_id,
                AccessRequest.status == RequestStatus.PENDING
            )
            .values(
                status=new_status,
                responded_at=responded_at,
                responded_by_id=responded_by_id
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return (result.rowcount or 0) == 1

    async def delete_for_property(self, property_id: int) -> int:
        """Remove requests scoped to a listing that is being deleted. Nothing is committed here."""
        result = await self.db.execute(
            delete(AccessRequest)
            .where(AccessRequest.property_id == property_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
