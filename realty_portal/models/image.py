"""
PropertyImage model for the ordered image gallery of a listing.
"""

from sqlalchemy import String, Integer, Boolean, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from realty_portal.database import Base
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from realty_portal.models.property import Property


class PropertyImage(Base):
    """
    One image of a property gallery.
    Exactly one image per property carries the primary flag: the first one
    submitted.
    """

    __tablename__ = "property_images"

    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the property this image belongs to"
    )

    url: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
        comment="Public URL of the image"
    )

    is_primary: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether this is the cover image for the property"
    )

    display_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="1-based position in the gallery"
    )

    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="images",
        lazy="noload"
    )

    def __repr__(self) -> str:
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, primary={self.is_primary})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "is_primary": self.is_primary,
            "display_order": self.display_order,
        }


# Gallery lookups: primary first, then submission order
property_images_order_index = Index(
    'idx_property_images_property_order',
    PropertyImage.property_id,
    PropertyImage.display_order
)

# At most one primary image per property
primary_image_unique_index = Index(
    'uq_property_images_primary',
    PropertyImage.property_id,
    unique=True,
    postgresql_where=PropertyImage.is_primary.is_(True),
    sqlite_where=PropertyImage.is_primary.is_(True)
)
