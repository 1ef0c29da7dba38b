"""
Utility modules for the Realty Portal API.
"""

from .auth import (
    create_access_token,
    verify_token,
    extract_token_from_header,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    StorageError,
    InvalidCredentialsError,
    InvalidTokenError,
    InactiveUserError,
    InsufficientPermissionsError,
    DuplicatePendingRequestError,
    RequestAlreadyResolvedError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "verify_token",
    "extract_token_from_header",
    "TokenPayload",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "StorageError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "InactiveUserError",
    "InsufficientPermissionsError",
    "DuplicatePendingRequestError",
    "RequestAlreadyResolvedError"
]
