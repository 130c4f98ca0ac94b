"""
Course Service
Business logic for course operations.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from studyplan.repositories.course_repo import CourseRepository
from studyplan.models.base import utcnow
from studyplan.models.course import Course
from studyplan.schemas.course import CourseCreate, CourseUpdate
from studyplan.core.errors import AuthorizationError, PersistenceError

logger = logging.getLogger(__name__)

MSG_COURSE_ACCESS_DENIED = "Course not found or access denied"


class CourseService:
    """Service class for course operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.course_repo = CourseRepository(db)

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}. Please try again.") from e

    # ============================================================
    # Create Course
    # ============================================================
    async def create_course(
        self,
        course_data: CourseCreate,
        user_id: UUID
    ) -> Course:
        """
        Create a new course for a user.

        Args:
            course_data: Validated course creation data
            user_id: ID of the user creating the course

        Returns:
            Created course (topics not yet extracted)
        """
        course = await self.course_repo.add(
            user_id=user_id,
            topics_extracted=False,
            **course_data.model_dump(),
        )
        await self._commit("create course")
        logger.info(f"Course created: {course.id} for user {user_id}")
        return course

    # ============================================================
    # Get Single Course
    # ============================================================
    async def get_course(
        self,
        course_id: UUID,
        user_id: UUID
    ) -> Course:
        """
        Get a course by ID, verifying ownership.

        Raises:
            AuthorizationError: If the course is missing or owned by someone else
        """
        course = await self.course_repo.get_by_id(course_id)

        if not course:
            raise AuthorizationError(MSG_COURSE_ACCESS_DENIED)

        if course.user_id != user_id:
            logger.warning(
                f"Unauthorized access attempt: user {user_id} "
                f"tried to access course {course_id}"
            )
            raise AuthorizationError(MSG_COURSE_ACCESS_DENIED)

        return course

    # ============================================================
    # Get User's Courses
    # ============================================================
    async def get_user_courses(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 100
    ) -> List[Course]:
        """All courses of a user, newest first."""
        return await self.course_repo.get_all_for_user(user_id, skip, limit)

    # ============================================================
    # Update Course
    # ============================================================
    async def update_course(
        self,
        course_id: UUID,
        course_data: CourseUpdate,
        user_id: UUID
    ) -> Course:
        """
        Partially update a course, verifying ownership.

        Only fields present in the request are changed.
        """
        course = await self.get_course(course_id, user_id)

        update_data = course_data.model_dump(exclude_unset=True)

        # name and end_date are required columns; an explicit null leaves them as they are
        for required in ("name", "end_date"):
            if update_data.get(required, ...) is None:
                update_data.pop(required)

        if not update_data:
            return course

        await self.course_repo.assign(course, updated_at=utcnow(), **update_data)
        await self._commit("update course")
        return course

    async def set_syllabus_reference(
        self,
        course_id: UUID,
        syllabus_url: str,
        user_id: UUID
    ) -> Course:
        """Remember where the course's syllabus came from."""
        course = await self.get_course(course_id, user_id)
        await self.course_repo.assign(course, syllabus_url=syllabus_url[:1000], updated_at=utcnow())
        await self._commit("update course")
        return course

    # ============================================================
    # Delete Course
    # ============================================================
    async def delete_course(
        self,
        course_id: UUID,
        user_id: UUID
    ) -> bool:
        """
        Delete a course, verifying ownership.

        Topics are removed by the database cascade.
        """
        course = await self.get_course(course_id, user_id)
        await self.course_repo.remove(course)
        await self._commit("delete course")
        logger.info(f"Course deleted: {course_id}")
        return True
