"""
Property model for rental and sale listings.
Handles listing data, pricing, status and relationship management.
"""

from sqlalchemy import String, Text, Numeric, Enum as SQLEnum, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from realty_portal.database import Base, TimestampMixin
from decimal import Decimal
import enum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from realty_portal.models.user import User
    from realty_portal.models.image import PropertyImage
    from realty_portal.models.access_request import AccessRequest


class PropertyType(str, enum.Enum):
    """Property type enumeration for rental or sale listings."""
    SALE = "sale"
    RENTAL = "rental"


class PropertyStatus(str, enum.Enum):
    """Commercial status of a listing."""
    AVAILABLE = "available"
    SOLD = "sold"
    RENTED = "rented"
    RESERVED = "reserved"


class Property(TimestampMixin, Base):
    """
    Property model for managing rental and sale listings.
    A listing may be assigned to an agent; editing rights come from approved
    access requests, never from the assignment.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property listing title"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Detailed property description"
    )

    property_type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType, name="property_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
        comment="Property type - sale or rental"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Property price in local currency"
    )

    surface_area: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=True,
        comment="Surface area in square metres"
    )

    address: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Street address"
    )

    city: Mapped[Optional[str]] = mapped_column(
        String(120),
        nullable=True,
        index=True,
        comment="City"
    )

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus, name="property_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True,
        comment="Listing status"
    )

    agent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Agent the listing is assigned to"
    )

    agent: Mapped[Optional["User"]] = relationship(
        "User",
        back_populates="properties",
        lazy="selectin"
    )

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PropertyImage.is_primary.desc(), PropertyImage.display_order.asc()"
    )

    # Requests scoped to a deleted listing go with it; the FK cascade removes them
    access_requests: Mapped[List["AccessRequest"]] = relationship(
        "AccessRequest",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload"
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}, price={self.price})>"

    @property
    def primary_image(self) -> Optional["PropertyImage"]:
        """Get the primary image for this property."""
        for image in self.images:
            if image.is_primary:
                return image
        return None

    @property
    def agent_name(self) -> Optional[str]:
        return self.agent.full_name if self.agent else None

    def snapshot(self) -> dict:
        """Key fields recorded in the audit trail."""
        return {
            "title": self.title,
            "property_type": self.property_type.value,
            "price": str(self.price),
            "city": self.city,
            "status": self.status.value,
            "agent_id": self.agent_id,
        }

    def to_dict(self, include_images: bool = False) -> dict:
        """
        Convert property to dictionary.

        Args:
            include_images: Whether to include the ordered image list

        Returns:
            Dictionary representation of property
        """
        primary = self.primary_image
        result = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "property_type": self.property_type.value,
            "price": self.price,
            "surface_area": self.surface_area,
            "address": self.address,
            "city": self.city,
            "status": self.status.value,
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "primary_image_url": primary.url if primary else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

        if include_images:
            result["images"] = [image.to_dict() for image in self.images]

        return result


# Public search filters on type, city and price together
type_city_price_index = Index(
    'idx_properties_type_city_price',
    Property.property_type,
    Property.city,
    Property.price
)

# Agent dashboard lists assigned listings newest first
agent_created_index = Index(
    'idx_properties_agent_created',
    Property.agent_id,
    Property.created_at.desc()
)
