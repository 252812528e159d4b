"""Base repository pattern."""

from typing import Generic, TypeVar, Type, Optional, List, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from rentevent.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations.

    Repositories never commit; the caller's unit of work owns the transaction.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class.
            session: The async database session.
        """
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get a record by its primary key."""
        return await self.session.get(self.model, id)

    async def get_all(self, skip: int = 0, limit: Optional[int] = None) -> List[ModelType]:
        """Get all records ordered by primary key."""
        stmt = select(self.model).order_by(self.model.id).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def save(self, instance: ModelType) -> ModelType:
        """Insert or update a record, cascading to owned children."""
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Delete a record, cascading to owned children."""
        await self.session.delete(instance)
        await self.session.flush()
