"""
Shared model columns.

`BaseModel` gives users and courses a UUID primary key plus created /
updated timestamps. Topics have their own id and created_at only.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Uuid, func

from studyplan.db.database import Base


def utcnow() -> datetime:
    """Timezone-aware current time, used as the Python-side column default."""
    return datetime.now(timezone.utc)


class BaseModel(Base):
    __abstract__ = True

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False, index=True)

    # Filled in Python so they are readable right after a flush; async
    # sessions cannot lazily reload server defaults.
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id})>"
