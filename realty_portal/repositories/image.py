"""
Repository for PropertyImage model operations.
"""

from typing import List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.models.image import PropertyImage
from realty_portal.models.property import Property
from realty_portal.repositories.base import BaseRepository


def build_images(urls: List[str]) -> List[PropertyImage]:
    """First URL becomes the primary image; display order follows submission order from 1."""
    return [
        PropertyImage(url=url, is_primary=(position == 1), display_order=position)
        for position, url in enumerate(urls, start=1)
    ]


class ImageRepository(BaseRepository[PropertyImage]):
    """Repository for PropertyImage database operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyImage, db)

    async def get_by_property_id(self, property_id: int) -> List[PropertyImage]:
        """
        Get all images for a specific property.

        Returns:
            Images ordered primary first, then by display order
        """
        query = (
            select(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .order_by(PropertyImage.is_primary.desc(), PropertyImage.display_order.asc())
        )

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_by_property_id(self, property_id: int) -> int:
        query = select(func.count(PropertyImage.id)).where(
            PropertyImage.property_id == property_id
        )

        result = await self.db.execute(query)
        return result.scalar() or 0

    async def replace_for_property(self, property_obj: Property, urls: List[str]) -> List[PropertyImage]:
        """
        Swap the image set of a loaded property for the given ordered URLs.

        The old rows are flushed out before the new ones go in so the
        one-primary index never sees two primaries. Nothing is committed here;
        the caller owns the transaction.
        """
        property_obj.images.clear()
        await self.db.flush()

        images = build_images(urls)
        property_obj.images.extend(images)
        await self.db.flush()
        return images
