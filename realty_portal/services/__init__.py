"""
Service layer for business logic implementation.
Contains services for authentication, permissions, the access request
workflow, listing management, auditing and error handling.
"""

from .auth import AuthService
from .permission import PermissionService
from .access_request import AccessRequestService
from .audit import AuditService
from .property import PropertyService
from .user import UserService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "PermissionService",
    "AccessRequestService",
    "AuditService",
    "PropertyService",
    "UserService",
    "ErrorHandlerService"
]
