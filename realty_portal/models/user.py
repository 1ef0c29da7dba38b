"""
User model with authentication and role management.
Handles accounts for administrators and real-estate agents.
"""

from sqlalchemy import String, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from realty_portal.database import Base, TimestampMixin
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
import enum
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from realty_portal.models.property import Property
    from realty_portal.models.access_request import AccessRequest

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    ADMIN = "admin"
    AGENT = "agent"


class User(TimestampMixin, Base):
    """
    User model for authentication and authorization.
    Accounts are provisioned by operators; the API never changes a role.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="User's full name"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.AGENT,
        index=True,
        comment="User role for access control"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
        comment="Whether the user account is active"
    )

    # Listings assigned to this agent; assignment does not grant edit rights
    properties: Mapped[List["Property"]] = relationship(
        "Property",
        back_populates="agent",
        lazy="noload"
    )

    access_requests: Mapped[List["AccessRequest"]] = relationship(
        "AccessRequest",
        back_populates="user",
        foreign_keys="AccessRequest.user_id",
        cascade="all, delete-orphan",
        lazy="noload"
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        if not password or len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """
        Verify a password against the stored hash.

        A stored value that is not a recognised hash never matches.
        """
        try:
            return pwd_context.verify(password, self.hashed_password)
        except ValueError:
            return False

    def set_password(self, password: str) -> None:
        self.hashed_password = self.hash_password(password)

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    @property
    def is_agent(self) -> bool:
        """Check if user has agent role."""
        return self.role == UserRole.AGENT

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excluding sensitive data).

        Returns:
            Dictionary representation of user
        """
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role.value,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
