"""
Repository layer for data access operations.
Repositories flush into the caller's transaction; services decide when to commit.
"""

from realty_portal.repositories.base import BaseRepository
from realty_portal.repositories.property import PropertyRepository, PropertySearchFilters
from realty_portal.repositories.image import ImageRepository
from realty_portal.repositories.user import UserRepository
from realty_portal.repositories.access_request import AccessRequestRepository
from realty_portal.repositories.audit_log import AuditLogRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "ImageRepository",
    "UserRepository",
    "AccessRequestRepository",
    "AuditLogRepository"
]
