"""
Topic Schemas

Pydantic models for topic extraction, review drafts and persisted topics.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


def _clean_title(value: str) -> str:
    title = value.strip()
    if not title:
        raise ValueError("Topic title cannot be empty")
    return title


# ============================================================
# Transient (pre-persistence) Topics
# ============================================================

class ExtractedTopic(BaseModel):
    """
    Candidate topic produced by extraction or manual editing.

    `id` is client-side only and not stable. `keywords` is always a list;
    an empty list means no keywords.
    """
    id: Optional[str] = None
    title: str = Field(..., max_length=200)
    order: Optional[int] = Field(default=None, ge=1)
    keywords: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _clean_title(value)

    @field_validator("keywords", mode="before")
    @classmethod
    def normalize_keywords(cls, value):
        """Keep only non-blank strings; anything else becomes []."""
        if not isinstance(value, list):
            return []
        return [k.strip() for k in value if isinstance(k, str) and k.strip()]


class TopicExtractionMetadata(BaseModel):
    total_topics: int
    processing_time: int = Field(description="Milliseconds spent, for reporting only")
    confidence: float = Field(ge=0, le=100)


# ============================================================
# Request Schemas
# ============================================================

class TopicExtractRequest(BaseModel):
    """Raw syllabus text to extract topics from."""
    text: str = Field(..., description="Syllabus text")


class TopicSaveRequest(BaseModel):
    """Replace all topics of a course with this list."""
    topics: List[ExtractedTopic]


class TopicCreate(BaseModel):
    title: str = Field(..., max_length=200)
    content: str = Field(default="", description="Flattened keyword list")
    order_index: Optional[int] = Field(
        default=None,
        ge=1,
        description="Insert position; appended at the end when omitted"
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _clean_title(value)


class TopicUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _clean_title(value)


class DraftTopicCreate(BaseModel):
    title: str = Field(default="New Topic", max_length=200)


class DraftTopicUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    position: Optional[int] = Field(default=None, ge=1, description="Move to this 1-based position")


# ============================================================
# Response Schemas
# ============================================================

class TopicResponse(BaseModel):
    id: UUID
    course_id: UUID
    title: str
    content: str
    order_index: int
    keywords: List[str] = []
    created_at: datetime

    class Config:
        from_attributes = True


class TopicListResponse(BaseModel):
    topics: List[TopicResponse]
    total: int


class ReviewDraftResponse(BaseModel):
    course_id: UUID
    topics: List[ExtractedTopic]
    has_changes: bool
    metadata: Optional[TopicExtractionMetadata] = None
    created_at: datetime
