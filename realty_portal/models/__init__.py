"""
Database models for the Realty Portal API.
Includes users, listings, images, access requests and the audit trail.
"""

from realty_portal.models.user import User, UserRole
from realty_portal.models.property import Property, PropertyType, PropertyStatus
from realty_portal.models.image import PropertyImage
from realty_portal.models.access_request import AccessRequest, AccessAction, RequestStatus
from realty_portal.models.audit_log import AuditLogEntry

__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyType",
    "PropertyStatus",
    "PropertyImage",
    "AccessRequest",
    "AccessAction",
    "RequestStatus",
    "AuditLogEntry",
]
