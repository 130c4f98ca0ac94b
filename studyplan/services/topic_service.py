"""
Topic Service

Persistence of course topics: replace the whole list after review, and
the single-topic create / update / delete operations.

Every write runs as one transaction. Repository helpers only flush; this
service commits once and rolls back on any database error, so a failed
replace never leaves a course half-cleared.
"""

import logging
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from studyplan.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    PersistenceError,
)
from studyplan.models.base import utcnow
from studyplan.models.course import Course
from studyplan.models.topic import Topic
from studyplan.repositories.course_repo import CourseRepository
from studyplan.repositories.topic_repo import TopicRepository
from studyplan.schemas.topic import ExtractedTopic, TopicCreate, TopicUpdate
from studyplan.services.course_service import MSG_COURSE_ACCESS_DENIED

logger = logging.getLogger(__name__)

KEYWORD_SEPARATOR = ", "


# ============================================================
# CONVERSIONS
# ============================================================

def topic_to_extracted(topic: Topic) -> ExtractedTopic:
    """Persisted topic -> transient topic (keywords recovered from content)."""
    return ExtractedTopic(
        id=str(topic.id),
        title=topic.title,
        order=topic.order_index,
        keywords=topic.keywords,
    )


def extracted_to_topic_fields(
    extracted: ExtractedTopic,
    course_id: UUID,
    position: int = 0
) -> dict:
    """
    Transient topic -> column values.

    `position` is the 0-based list position, used when the topic carries
    no explicit order.
    """
    return {
        "course_id": course_id,
        "title": extracted.title,
        "content": KEYWORD_SEPARATOR.join(extracted.keywords),
        "order_index": extracted.order or position + 1,
    }


def _dense_rows(course_id: UUID, topics: Sequence[ExtractedTopic]) -> List[dict]:
    """Column dicts ordered by requested order (ties keep list order), renumbered 1..N."""
    rows = [
        extracted_to_topic_fields(topic, course_id, position)
        for position, topic in enumerate(topics)
    ]
    ranked = sorted(enumerate(rows), key=lambda pair: (pair[1]["order_index"], pair[0]))
    packed = []
    for order, (_, row) in enumerate(ranked, start=1):
        row["order_index"] = order
        packed.append(row)
    return packed


class TopicService:
    """Service for persisting and editing course topics."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.topic_repo = TopicRepository(db)
        self.course_repo = CourseRepository(db)

    # ============================================================
    # ACCESS CHECKS
    # ============================================================

    async def _verify_course_access(
        self,
        course_id: UUID,
        user_id: Optional[UUID]
    ) -> Course:
        if user_id is None:
            raise AuthenticationError("User not authenticated")

        course = await self.course_repo.get_owned(course_id, user_id)
        if not course:
            logger.warning(f"Course access denied: course {course_id}, user {user_id}")
            raise AuthorizationError(MSG_COURSE_ACCESS_DENIED)
        return course

    async def _verify_topic_access(
        self,
        topic_id: UUID,
        user_id: Optional[UUID]
    ) -> Topic:
        if user_id is None:
            raise AuthenticationError("User not authenticated")

        topic = await self.topic_repo.get_by_id(topic_id)
        if not topic:
            raise NotFoundError("Topic not found")

        await self._verify_course_access(topic.course_id, user_id)
        return topic

    async def _rollback(self, action: str, error: SQLAlchemyError) -> PersistenceError:
        await self.db.rollback()
        logger.error(f"Failed to {action}: {error}")
        return PersistenceError(f"Failed to {action}. Please try again.")

    # ============================================================
    # REPLACE ALL TOPICS
    # ============================================================

    async def save_topics_for_course(
        self,
        course_id: UUID,
        topics: Sequence[ExtractedTopic],
        user_id: Optional[UUID],
    ) -> List[Topic]:
        """
        Replace every topic of a course with `topics` and mark the course
        as having extracted topics.

        An empty list clears the course's topics and still sets the flag.

        Raises:
            AuthenticationError: No user
            AuthorizationError: Course missing or not owned by the user
            PersistenceError: Database failure (nothing is changed)
        """
        course = await self._verify_course_access(course_id, user_id)
        rows = _dense_rows(course_id, topics)

        try:
            removed = await self.topic_repo.delete_by_course(course_id)
            saved = await self.topic_repo.add_many(rows)
            course.topics_extracted = True
            course.updated_at = utcnow()
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._rollback("save topics", e) from e

        logger.info(
            f"Saved {len(saved)} topics for course {course_id} "
            f"(replaced {removed})"
        )
        return saved

    # ============================================================
    # READ
    # ============================================================

    async def get_topics_for_course(
        self,
        course_id: UUID,
        user_id: Optional[UUID]
    ) -> List[Topic]:
        """Topics of an owned course, ordered by order_index."""
        await self._verify_course_access(course_id, user_id)
        return await self.topic_repo.get_by_course(course_id)

    # ============================================================
    # SINGLE TOPIC EDITS
    # ============================================================

    async def create_topic(
        self,
        course_id: UUID,
        topic_data: TopicCreate,
        user_id: Optional[UUID]
    ) -> Topic:
        """
        Add one topic, appended at the end or inserted at
        `topic_data.order_index` with later topics shifted down.
        """
        await self._verify_course_access(course_id, user_id)

        try:
            existing = await self.topic_repo.get_by_course(course_id)
            position = topic_data.order_index or len(existing) + 1
            position = min(position, len(existing) + 1)

            topic = Topic(
                course_id=course_id,
                title=topic_data.title,
                content=topic_data.content,
                order_index=position,
            )
            self.db.add(topic)

            ordered = list(existing)
            ordered.insert(position - 1, topic)
            await self.topic_repo.reindex(ordered)
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._rollback("create topic", e) from e

        return topic

    async def update_topic(
        self,
        topic_id: UUID,
        topic_data: TopicUpdate,
        user_id: Optional[UUID]
    ) -> Topic:
        """Rename, change content, or move a topic to a new 1-based position."""
        topic = await self._verify_topic_access(topic_id, user_id)
        update_data = topic_data.model_dump(exclude_unset=True)

        try:
            if update_data.get("title") is not None:
                topic.title = update_data["title"]
            if update_data.get("content") is not None:
                topic.content = update_data["content"]

            new_position = update_data.get("order_index")
            if new_position is not None and new_position != topic.order_index:
                ordered = [
                    t for t in await self.topic_repo.get_by_course(topic.course_id)
                    if t.id != topic.id
                ]
                ordered.insert(min(new_position, len(ordered) + 1) - 1, topic)
                await self.topic_repo.reindex(ordered)

            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._rollback("update topic", e) from e

        return topic

    async def delete_topic(
        self,
        topic_id: UUID,
        user_id: Optional[UUID]
    ) -> None:
        """Delete a topic and close the gap in the course's ordering."""
        topic = await self._verify_topic_access(topic_id, user_id)
        course_id = topic.course_id

        try:
            remaining = [
                t for t in await self.topic_repo.get_by_course(course_id)
                if t.id != topic.id
            ]
            await self.topic_repo.remove(topic)
            await self.topic_repo.reindex(remaining)
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._rollback("delete topic", e) from e

        logger.info(f"Topic {topic_id} deleted from course {course_id}")
