"""
Topic review drafts.

Extracted topics are held in memory, keyed by (user, course), while the
user renames, adds, removes and reorders them. Nothing is persisted
until the draft is committed through TopicService.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple, TypeVar
from uuid import UUID

from studyplan.core.errors import NotFoundError, ValidationError
from studyplan.models.topic import Topic
from studyplan.schemas.topic import (
    ExtractedTopic,
    ReviewDraftResponse,
    TopicExtractionMetadata,
)
from studyplan.services.topic_service import TopicService

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_NEW_TOPIC_TITLE = "New Topic"
MSG_EMPTY_DRAFT = "Please add at least one topic before saving."
MSG_NO_DRAFT = "No topics awaiting review for this course"
_TITLE_MAX_LENGTH = 200


def _snapshot(topics: List[ExtractedTopic]) -> List[dict]:
    return [t.model_dump() for t in topics]


@dataclass
class TopicReviewDraft:
    """Editable copy of extracted topics plus the snapshot it started from."""
    user_id: UUID
    course_id: UUID
    topics: List[ExtractedTopic]
    metadata: Optional[TopicExtractionMetadata] = None
    initial: List[dict] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    touched_at: float = field(default_factory=time.time)

    @classmethod
    def from_topics(
        cls,
        user_id: UUID,
        course_id: UUID,
        topics: List[ExtractedTopic],
        metadata: Optional[TopicExtractionMetadata] = None,
    ) -> "TopicReviewDraft":
        copies = [t.model_copy(deep=True) for t in topics]
        return cls(
            user_id=user_id,
            course_id=course_id,
            topics=copies,
            metadata=metadata,
            initial=_snapshot(copies),
        )

    @property
    def has_changes(self) -> bool:
        return _snapshot(self.topics) != self.initial

    # ------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------

    def add_topic(self, title: str = DEFAULT_NEW_TOPIC_TITLE) -> ExtractedTopic:
        topic = ExtractedTopic(
            id=f"topic-{uuid.uuid4().hex}",
            title=self._clean_title(title),
            order=len(self.topics) + 1,
            keywords=[],
        )
        self.topics.append(topic)
        return topic

    def rename_topic(self, topic_id: str, title: str) -> ExtractedTopic:
        topic = self._find(topic_id)
        topic.title = self._clean_title(title)
        return topic

    def remove_topic(self, topic_id: str) -> None:
        topic = self._find(topic_id)
        self.topics.remove(topic)
        self._reindex()

    def move_topic(self, topic_id: str, position: int) -> ExtractedTopic:
        """Move a topic to a 1-based position (clamped to the list bounds)."""
        topic = self._find(topic_id)
        self.topics.remove(topic)
        index = max(0, min(position - 1, len(self.topics)))
        self.topics.insert(index, topic)
        self._reindex()
        return topic

    def to_response(self) -> ReviewDraftResponse:
        return ReviewDraftResponse(
            course_id=self.course_id,
            topics=self.topics,
            has_changes=self.has_changes,
            metadata=self.metadata,
            created_at=self.created_at,
        )

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _find(self, topic_id: str) -> ExtractedTopic:
        for topic in self.topics:
            if topic.id == topic_id:
                return topic
        raise NotFoundError(f"Topic {topic_id} not found in review draft")

    def _reindex(self) -> None:
        for order, topic in enumerate(self.topics, start=1):
            topic.order = order

    @staticmethod
    def _clean_title(title: Optional[str]) -> str:
        cleaned = (title or "").strip()
        if not cleaned:
            raise ValidationError("Topic title cannot be empty")
        if len(cleaned) > _TITLE_MAX_LENGTH:
            raise ValidationError(f"Topic title must be at most {_TITLE_MAX_LENGTH} characters")
        return cleaned


class ReviewDraftStore:
    """
    Bounded, expiring, thread-safe map of review drafts.

    Drafts idle for longer than `ttl_seconds` are dropped; when more than
    `max_drafts` are held the least recently touched go first.
    """

    def __init__(
        self,
        max_drafts: int = 500,
        ttl_seconds: int = 24 * 3600,
        clock: Callable[[], float] = time.time,
    ):
        self._drafts: Dict[Tuple[UUID, UUID], TopicReviewDraft] = {}
        self._lock = threading.Lock()
        self._max_drafts = max_drafts
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._drafts)

    def put(self, draft: TopicReviewDraft) -> TopicReviewDraft:
        """Store a draft, replacing any existing one for the same course."""
        self._cleanup()
        draft.touched_at = self._clock()
        with self._lock:
            self._drafts[(draft.user_id, draft.course_id)] = draft
            overflow = len(self._drafts) - self._max_drafts
            if overflow > 0:
                oldest = sorted(self._drafts.values(), key=lambda d: d.touched_at)
                for old in oldest[:overflow]:
                    self._drafts.pop((old.user_id, old.course_id), None)
        return draft

    def get(self, user_id: UUID, course_id: UUID) -> Optional[TopicReviewDraft]:
        self._cleanup()
        with self._lock:
            return self._drafts.get((user_id, course_id))

    def require(self, user_id: UUID, course_id: UUID) -> TopicReviewDraft:
        draft = self.get(user_id, course_id)
        if draft is None:
            raise NotFoundError(MSG_NO_DRAFT)
        return draft

    def apply(
        self,
        user_id: UUID,
        course_id: UUID,
        operation: Callable[[TopicReviewDraft], T],
    ) -> T:
        """Run an edit against a draft while holding the store lock."""
        self._cleanup()
        with self._lock:
            draft = self._drafts.get((user_id, course_id))
            if draft is None:
                raise NotFoundError(MSG_NO_DRAFT)
            result = operation(draft)
            draft.touched_at = self._clock()
            return result

    def discard(self, user_id: UUID, course_id: UUID) -> bool:
        with self._lock:
            return self._drafts.pop((user_id, course_id), None) is not None

    async def commit(
        self,
        user_id: UUID,
        course_id: UUID,
        topic_service: TopicService,
    ) -> List[Topic]:
        """
        Persist the reviewed topics and drop the draft.

        Raises:
            NotFoundError: No draft for this course
            ValidationError: The draft has no topics
        """
        draft = self.require(user_id, course_id)
        if not draft.topics:
            raise ValidationError(MSG_EMPTY_DRAFT)

        saved = await topic_service.save_topics_for_course(
            course_id, list(draft.topics), user_id
        )
        self.discard(user_id, course_id)
        logger.info(f"Review draft committed: {len(saved)} topics for course {course_id}")
        return saved

    def _cleanup(self) -> None:
        cutoff = self._clock() - self._ttl_seconds
        with self._lock:
            expired = [key for key, draft in self._drafts.items() if draft.touched_at < cutoff]
            for key in expired:
                self._drafts.pop(key, None)
