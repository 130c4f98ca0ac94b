from studyplan.repositories.base import BaseRepository
from studyplan.repositories.user_repo import UserRepository
from studyplan.repositories.course_repo import CourseRepository
from studyplan.repositories.topic_repo import TopicRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "CourseRepository",
    "TopicRepository",
]
