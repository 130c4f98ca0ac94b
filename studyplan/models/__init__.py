from studyplan.models.base import Base
from studyplan.models.user import User
from studyplan.models.course import Course
from studyplan.models.topic import Topic

__all__ = [
    "Base",
    "User",
    "Course",
    "Topic",
]
