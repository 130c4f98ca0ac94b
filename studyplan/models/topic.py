import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from studyplan.db.database import Base
from .base import utcnow


# ===================
# Topic Model
# ===================
class Topic(Base):
    """
    A persisted unit of course content.

    `order_index` is dense within a course (1..N); services reindex on
    every insert, move and delete.
    """
    __tablename__ = "topics"
    __table_args__ = (
        UniqueConstraint("course_id", "order_index", name="uq_topics_course_order"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)

    course_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    title = Column(String(200), nullable=False)

    # Flattened keyword list, joined with ", "
    content = Column(Text, nullable=False, default="")

    order_index = Column(Integer, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False
    )

    course = relationship("Course", back_populates="topics")

    @property
    def keywords(self) -> list[str]:
        """Keyword list recovered from the flattened content string."""
        if not self.content:
            return []
        return [k.strip() for k in self.content.split(", ") if k.strip()]

    def __repr__(self):
        return f"<Topic(id={self.id}, order_index={self.order_index})>"
