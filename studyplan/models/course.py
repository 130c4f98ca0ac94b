from sqlalchemy import Column, String, Boolean, Date, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel


class Course(BaseModel):
    __tablename__ = "courses"

    # Owner never changes after creation; update schemas do not expose it
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    end_date = Column(Date, nullable=False)
    description = Column(String(500), nullable=True)
    syllabus_url = Column(String(1000), nullable=True)
    topics_extracted = Column(Boolean, default=False, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="courses")
    topics = relationship(
        "Topic",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Topic.order_index",
    )
