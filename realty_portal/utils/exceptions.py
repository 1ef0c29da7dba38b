"""
Custom exception classes for the Realty Portal API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationError(APIException):
    """Validation error exception carrying field-level detail."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        super().__init__(
            status_code=422,
            detail=detail,
            error_code="VALIDATION_ERROR"
        )
        self.field_errors = field_errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, field_errors=[{"field": field, "message": message}])


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[Any] = None):
        detail = f"{resource} not found"
        if resource_id is not None:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class ConflictError(APIException):
    """Resource conflict exception."""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )


class StorageError(APIException):
    """Backing-store failure. The cause is logged, never returned."""

    def __init__(self, detail: str = "Storage operation failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="STORAGE_ERROR"
        )


# Authentication specific exceptions
class InvalidCredentialsError(UnauthorizedError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    """Missing, malformed, tampered or expired token."""

    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(detail)


class InactiveUserError(ForbiddenError):
    """Inactive user account exception."""

    def __init__(self, detail: str = "User account is inactive"):
        super().__init__(detail)


class InsufficientPermissionsError(ForbiddenError):
    """Insufficient permissions exception."""

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


# Access request workflow exceptions
class DuplicatePendingRequestError(ConflictError):
    """The agent already has an identical request awaiting review."""

    def __init__(self, action: str, property_id: Optional[int]):
        target = f"property {property_id}" if property_id is not None else "all properties"
        super().__init__(
            f"A pending '{action}' request for {target} already exists",
            error_code="DUPLICATE_PENDING"
        )


class RequestAlreadyResolvedError(ConflictError):
    """Approved and rejected requests are final."""

    def __init__(self, request_id: int, current_status: str):
        super().__init__(
            f"Access request {request_id} is already {current_status}",
            error_code="REQUEST_ALREADY_RESOLVED"
        )
