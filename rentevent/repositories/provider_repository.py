"""Repository for Provider models."""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentevent.db.models import Provider
from rentevent.repositories.base import BaseRepository


class ProviderRepository(BaseRepository[Provider]):
    """Repository for accessing providers."""

    def __init__(self, session: AsyncSession):
        super().__init__(Provider, session)

    async def get_by_name(self, name: str) -> Optional[Provider]:
        """Get provider by its unique name."""
        stmt = select(self.model).where(self.model.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
