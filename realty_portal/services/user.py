"""
User directory service for the admin back office.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from realty_portal.repositories.user import UserRepository
from realty_portal.models.user import User


class UserService:
    """Read-only access to provisioned accounts."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def list_active_agents(self) -> List[User]:
        """Active agents ordered by name, used when assigning listings."""
        return await self.user_repo.get_active_agents()
