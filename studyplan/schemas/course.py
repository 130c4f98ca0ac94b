from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


def _normalize_name(value: str) -> str:
    normalized = " ".join(value.split())
    if not normalized:
        raise ValueError("Course name is required")
    if len(normalized) < 3:
        raise ValueError("Course name must be at least 3 characters")
    return normalized


def _normalize_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _validate_end_date(value: date) -> date:
    if value < date.today():
        raise ValueError("End date must be today or in the future")
    return value


# ============================================================
# Request Schemas (What client sends)
# ============================================================

class CourseCreate(BaseModel):
    """Schema for creating a new course."""

    name: str = Field(
        ...,
        max_length=100,
        description="Course name between 3 and 100 characters",
    )
    end_date: date = Field(
        ...,
        description="Last day of the course (today or later)",
    )
    description: Optional[str] = Field(
        None,
        max_length=500,
        description="Optional course description up to 500 characters",
    )
    syllabus_url: Optional[str] = Field(
        None,
        max_length=1000,
        description="Optional reference to the uploaded syllabus",
    )

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        """Collapse whitespace and enforce the 3 character minimum."""
        return _normalize_name(value)

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: Optional[str]) -> Optional[str]:
        """Trim description; treat empty strings as None."""
        return _normalize_description(value)

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, value: date) -> date:
        return _validate_end_date(value)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Introduction to Programming",
                "end_date": "2026-12-18",
                "description": "CS101, Fall semester",
            }
        }


class CourseUpdate(BaseModel):
    """Schema for updating an existing course. The owner is not editable."""

    name: Optional[str] = Field(None, max_length=100)
    end_date: Optional[date] = None
    description: Optional[str] = Field(None, max_length=500)
    syllabus_url: Optional[str] = Field(None, max_length=1000)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _normalize_name(value)

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_description(value)

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, value: Optional[date]) -> Optional[date]:
        if value is None:
            return None
        return _validate_end_date(value)


# ============================================================
# Response Schemas (What server sends back)
# ============================================================

class CourseResponse(BaseModel):
    """Schema for course data returned from the API."""

    id: UUID
    user_id: UUID
    name: str
    end_date: date
    description: Optional[str] = None
    syllabus_url: Optional[str] = None
    topics_extracted: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
