"""Repository for Service models."""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentevent.db.models import Service
from rentevent.repositories.base import BaseRepository


class ServiceRepository(BaseRepository[Service]):
    """Repository for accessing catalog services."""

    def __init__(self, session: AsyncSession):
        super().__init__(Service, session)

    async def get_by_code(self, code: str) -> Optional[Service]:
        """Get service by its SERV-xxxxxxxx code."""
        stmt = select(self.model).where(self.model.code == code)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
