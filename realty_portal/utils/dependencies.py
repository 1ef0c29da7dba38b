"""
FastAPI dependency injection utilities for authentication and services.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from realty_portal.database import get_db
from realty_portal.models.user import User, UserRole
from realty_portal.services.auth import AuthService
from realty_portal.services.property import PropertyService
from realty_portal.services.access_request import AccessRequestService
from realty_portal.services.audit import AuditService
from realty_portal.services.user import UserService
from realty_portal.utils.exceptions import (
    UnauthorizedError,
    InsufficientPermissionsError
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_property_service(db: AsyncSession = Depends(get_db)) -> PropertyService:
    return PropertyService(db)


async def get_access_request_service(db: AsyncSession = Depends(get_db)) -> AccessRequestService:
    return AccessRequestService(db)


async def get_audit_service(db: AsyncSession = Depends(get_db)) -> AuditService:
    return AuditService(db)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current user with admin role.

    Raises:
        InsufficientPermissionsError: If user is not an admin
    """
    if current_user.role != UserRole.ADMIN:
        raise InsufficientPermissionsError("access admin resources")

    return current_user


async def get_current_agent_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current user with agent role.

    Administrators use the admin endpoints; the agent portal is for agents only.

    Raises:
        InsufficientPermissionsError: If user is not an agent
    """
    if current_user.role != UserRole.AGENT:
        raise InsufficientPermissionsError("access agent resources")

    return current_user
