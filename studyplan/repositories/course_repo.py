"""
Course Repository

Data access layer for Course model.
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from studyplan.repositories.base import BaseRepository
from studyplan.models.course import Course


class CourseRepository(BaseRepository[Course]):
    """Repository for Course model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Course, db)

    async def get_all_for_user(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 100
    ) -> List[Course]:
        """
        Get all courses for a specific user.

        Args:
            user_id: The owner's user ID
            skip: Number of records to skip (pagination)
            limit: Maximum number of records to return

        Returns:
            List of courses, newest first
        """
        stmt = (
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_owned(self, course_id: UUID, user_id: UUID) -> Optional[Course]:
        """Return the course only if `user_id` owns it."""
        stmt = (
            select(self.model)
            .where(self.model.id == course_id)
            .where(self.model.user_id == user_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
