"""
Topic Repository

Data access layer for Topic model.

Write helpers only flush; the calling service owns the transaction and
commits (or rolls back) once per operation.
"""

from typing import List, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete

from studyplan.repositories.base import BaseRepository
from studyplan.models.topic import Topic


class TopicRepository(BaseRepository[Topic]):
    """Repository for Topic model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Topic, db)

    async def get_by_course(self, course_id: UUID) -> List[Topic]:
        return await self.list_where(
            self.model.course_id == course_id,
            order_by=self.model.order_index,
        )

    async def delete_by_course(self, course_id: UUID) -> int:
        stmt = (
            delete(self.model)
            .where(self.model.course_id == course_id)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def add_many(self, rows: Sequence[dict]) -> List[Topic]:
        """Insert topics from column dicts and flush."""
        topics = [self.model(**row) for row in rows]
        self.db.add_all(topics)
        await self.db.flush()
        return topics

    async def reindex(self, ordered: Sequence[Topic]) -> None:
        """
        Assign order_index 1..N following the given sequence.

        Two passes through negative placeholders keep the
        (course_id, order_index) unique constraint satisfied after every
        individual UPDATE.
        """
        for i, topic in enumerate(ordered, start=1):
            topic.order_index = -i
        await self.db.flush()
        for i, topic in enumerate(ordered, start=1):
            topic.order_index = i
        await self.db.flush()
