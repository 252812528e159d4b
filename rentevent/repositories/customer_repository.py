"""Repository for Customer models."""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentevent.db.models import Customer
from rentevent.repositories.base import BaseRepository


class CustomerRepository(BaseRepository[Customer]):
    """Repository for accessing customers."""

    def __init__(self, session: AsyncSession):
        super().__init__(Customer, session)

    async def get_by_username(self, username: str) -> Optional[Customer]:
        """Get customer by login identifier."""
        stmt = select(self.model).where(self.model.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
