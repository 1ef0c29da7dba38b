"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    LoginRequest,
    CurrentUserResponse,
    LoginResponse
)

# User schemas
from .user import (
    AgentSummary
)

# Property schemas
from .property import (
    PropertyBase,
    PropertyCreate,
    PropertyUpdate,
    PropertySummary,
    PropertyResponse,
    PropertyListResponse
)

# Image schemas
from .image import (
    PropertyImageResponse,
    ImageReplaceRequest
)

# Access request schemas
from .access_request import (
    AccessRequestCreate,
    AccessRequestResolve,
    AccessRequestResponse
)

# Audit schemas
from .audit import (
    AuditLogEntryResponse,
    AuditLogListResponse
)

__all__ = [
    # Authentication
    "LoginRequest",
    "CurrentUserResponse",
    "LoginResponse",

    # User
    "AgentSummary",

    # Property
    "PropertyBase",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertySummary",
    "PropertyResponse",
    "PropertyListResponse",

    # Image
    "PropertyImageResponse",
    "ImageReplaceRequest",

    # Access requests
    "AccessRequestCreate",
    "AccessRequestResolve",
    "AccessRequestResponse",

    # Audit
    "AuditLogEntryResponse",
    "AuditLogListResponse"
]
