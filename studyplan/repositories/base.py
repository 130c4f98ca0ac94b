"""
Base Repository

Shared data access helpers for one model class.

Repositories never commit. Write helpers add to the session and flush so
generated values (ids, defaults) are readable; the service that owns the
operation commits once, or rolls back.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studyplan.db.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Lookups and flush-only writes for `model`."""

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def list_where(self, *criteria, order_by=None) -> List[ModelType]:
        stmt = select(self.model).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_where(self, *criteria) -> int:
        stmt = select(func.count(self.model.id)).where(*criteria)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    # -----------------------------
    # Writes (flush only)
    # -----------------------------
    async def add(self, **values) -> ModelType:
        instance = self.model(**values)
        self.db.add(instance)
        await self.db.flush()
        return instance

    async def assign(self, instance: ModelType, **values) -> ModelType:
        """Set attributes on a loaded instance and flush."""
        for key, value in values.items():
            setattr(instance, key, value)
        await self.db.flush()
        return instance

    async def remove(self, instance: ModelType) -> None:
        await self.db.delete(instance)
        await self.db.flush()
