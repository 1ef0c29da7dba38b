"""
User repository for authentication and user provisioning.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from realty_portal.repositories.base import BaseRepository
from realty_portal.models.user import User, UserRole
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with authentication support.
    Accounts are created here by provisioning only, never by self-registration.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, password, full_name
                      Optional: role (defaults to AGENT), is_active

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails or the email is taken
        """
        user_data = dict(user_data)
        email = User.validate_email_format(user_data["email"])

        existing_user = await self.get_by_email(email)
        if existing_user:
            raise ValueError(f"User with email {email} already exists")

        password = user_data.pop("password")
        create_data = {
            **user_data,
            "email": email,
            "hashed_password": User.hash_password(password),
            "role": user_data.get("role", UserRole.AGENT),
            "is_active": user_data.get("is_active", True)
        }

        created_user = await self.create(create_data)
        logger.info(f"Provisioned {created_user.role.value} account: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            User instance if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)

        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.is_active:
            logger.debug(f"Authentication failed: user {email} is inactive")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        return user

    async def get_active_agents(self) -> List[User]:
        """Active agents ordered by name, for assignment dropdowns."""
        try:
            query = (
                select(User)
                .where(User.role == UserRole.AGENT, User.is_active.is_(True))
                .order_by(User.full_name.asc(), User.id.asc())
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list active agents: {e}")
            raise
