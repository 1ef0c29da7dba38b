"""
AccessRequest model for the agent permission workflow.
An agent asks for the right to add, edit or delete listings; an administrator
approves or rejects the request.
"""

from sqlalchemy import String, Text, DateTime, Enum as SQLEnum, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from realty_portal.database import Base
from datetime import datetime
import enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from realty_portal.models.user import User
    from realty_portal.models.property import Property


class AccessAction(str, enum.Enum):
    """Granularity at which agent permissions are requested and granted."""
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"


class RequestStatus(str, enum.Enum):
    """Lifecycle of a request: pending, then approved or rejected for good."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class AccessRequest(Base):
    """
    A permission request raised by an agent.

    A null property_id is a global request: once approved it covers every
    listing for that action.
    """

    __tablename__ = "access_requests"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Agent who raised the request"
    )

    action: Mapped[AccessAction] = mapped_column(
        SQLEnum(AccessAction, name="access_action", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        comment="Requested action kind"
    )

    property_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        comment="Target listing, null for a global request"
    )

    justification: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Why the agent needs this permission"
    )

    status: Mapped[RequestStatus] = mapped_column(
        SQLEnum(RequestStatus, name="request_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RequestStatus.PENDING,
        index=True,
        comment="pending, approved or rejected"
    )

    responded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When an administrator resolved the request"
    )

    responded_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Administrator who resolved the request"
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="access_requests",
        foreign_keys=[user_id],
        lazy="selectin"
    )

    property_rel: Mapped[Optional["Property"]] = relationship(
        "Property",
        back_populates="access_requests",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return (
            f"<AccessRequest(id={self.id}, user_id={self.user_id}, action={self.action}, "
            f"property_id={self.property_id}, status={self.status})>"
        )

    @property
    def is_global(self) -> bool:
        return self.property_id is None

    @property
    def property_title(self) -> Optional[str]:
        return self.property_rel.title if self.property_rel else None

    def to_dict(self, include_requester: bool = False) -> dict:
        result = {
            "id": self.id,
            "user_id": self.user_id,
            "action": self.action.value,
            "property_id": self.property_id,
            "property_title": self.property_title,
            "justification": self.justification,
            "status": self.status.value,
            "created_at": self.created_at,
            "responded_at": self.responded_at,
        }

        if include_requester and self.user:
            result["requester_name"] = self.user.full_name
            result["requester_email"] = self.user.email

        return result


# Permission checks filter on user, action and status
permission_lookup_index = Index(
    'idx_access_requests_permission_lookup',
    AccessRequest.user_id,
    AccessRequest.action,
    AccessRequest.status,
    AccessRequest.property_id
)

# At most one pending request per agent, action and listing
pending_scoped_unique_index = Index(
    'uq_access_requests_pending_scoped',
    AccessRequest.user_id,
    AccessRequest.action,
    AccessRequest.property_id,
    unique=True,
    postgresql_where=text("status = 'pending' AND property_id IS NOT NULL"),
    sqlite_where=text("status = 'pending' AND property_id IS NOT NULL")
)

# NULLs are distinct in a unique index, so global requests need their own
pending_global_unique_index = Index(
    'uq_access_requests_pending_global',
    AccessRequest.user_id,
    AccessRequest.action,
    unique=True,
    postgresql_where=text("status = 'pending' AND property_id IS NULL"),
    sqlite_where=text("status = 'pending' AND property_id IS NULL")
)
