"""
Authentication service for user login and identity resolution.
Issues access tokens and turns verified tokens back into active users.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from realty_portal.repositories.user import UserRepository
from realty_portal.models.user import User
from realty_portal.utils.auth import create_access_token, verify_token
from realty_portal.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    InactiveUserError,
    ValidationError
)
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing login and token-based identity.
    Accounts are provisioned out of band; there is no registration flow.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Authenticated User object

        Raises:
            ValidationError: If email or password is blank
            InvalidCredentialsError: If the account is unknown, inactive or the password is wrong
        """
        if not email or not email.strip():
            raise ValidationError.for_field("email", "Email is required")

        if not password:
            raise ValidationError.for_field("password", "Password is required")

        user = await self.user_repo.authenticate_user(email, password)

        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    def create_token(self, user: User) -> str:
        """Sign an access token carrying the user's identity summary."""
        return create_access_token(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role
        )

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and create an access token.

        Returns:
            Tuple of (user, access_token)

        Raises:
            InvalidCredentialsError: If credentials are invalid
        """
        user = await self.authenticate_user(email, password)
        return user, self.create_token(user)

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        The token is checked statelessly first; the account is then reloaded
        so a deactivated user loses access before the token expires.

        Raises:
            InvalidTokenError: If the token is invalid, expired or names an unknown user
            InactiveUserError: If user account is inactive
        """
        token_payload = verify_token(token)
        if token_payload is None:
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(token_payload.user_id)
        if not user:
            logger.warning(f"Token presented for unknown user id {token_payload.user_id}")
            raise InvalidTokenError()

        if not user.is_active:
            raise InactiveUserError()

        return user
