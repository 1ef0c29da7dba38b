"""
Authentication API endpoints for login and current identity.
"""

from fastapi import APIRouter, Depends, status
from realty_portal.models.user import User
from realty_portal.services.auth import AuthService
from realty_portal.schemas.auth import (
    LoginRequest,
    LoginResponse,
    CurrentUserResponse
)
from realty_portal.schemas.error import get_error_responses, get_auth_error_responses
from realty_portal.utils.dependencies import get_auth_service, get_current_user
from realty_portal.config import settings


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _identity(user: User) -> CurrentUserResponse:
    return CurrentUserResponse(
        id=user.id,
        email=user.email,
        name=user.full_name,
        role=user.role
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password, returns a signed access token",
    responses=get_error_responses(401, 422)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Authenticate user and return an access token with the identity summary.

    Raises:
        InvalidCredentialsError: If credentials are invalid or the account is inactive
    """
    user, access_token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )

    return LoginResponse(
        user=_identity(user),
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Return the identity behind the bearer token",
    responses=get_auth_error_responses()
)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> CurrentUserResponse:
    return _identity(current_user)
