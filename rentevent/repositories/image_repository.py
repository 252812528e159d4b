"""Repository for Image models."""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentevent.db.models import Image
from rentevent.repositories.base import BaseRepository


class ImageRepository(BaseRepository[Image]):
    """Repository for accessing service images."""

    def __init__(self, session: AsyncSession):
        super().__init__(Image, session)

    async def get_by_public_id(self, public_id: str) -> Optional[Image]:
        stmt = select(self.model).where(self.model.public_id == public_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_by_public_id(self, public_id: str) -> int:
        """Delete the image row holding public_id.

        Goes through the session (not a bulk DELETE) so an image that was
        already detached from its service collection is deleted exactly once.

        Returns:
            Number of rows deleted (0 or 1)
        """
        image = await self.get_by_public_id(public_id)
        if image is None:
            return 0
        await self.delete(image)
        return 1
