"""
Request dependencies: the authenticated user, services, pipeline
components and service-error translation.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from studyplan.db.database import get_db
from studyplan.models import User
from studyplan.core.config import settings
from studyplan.core.errors import AuthenticationError, ServiceError, http_status_for, user_message
from studyplan.ai.llm.openai_client import ChatCompletionClient
from studyplan.services.auth_service import AuthService
from studyplan.services.course_service import CourseService
from studyplan.services.file_reader_service import FileReaderService
from studyplan.services.review_service import ReviewDraftStore
from studyplan.services.topic_extraction_service import TopicExtractionClient
from studyplan.services.topic_service import TopicService


# Security scheme for Swagger UI; missing credentials are reported as 401 below
security = HTTPBearer(auto_error=False)


# =====================================================
# Error translation
# =====================================================
def raise_http_error(error: ServiceError) -> None:
    """Translate a service error into an HTTPException."""
    status_code = http_status_for(error)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    raise HTTPException(
        status_code=status_code,
        detail=user_message(error),
        headers=headers,
    ) from error


# =====================================================
# Current user
# =====================================================
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Resolve the bearer token to an active user.

    Raises:
        HTTPException 401: Token missing, invalid or expired
    """
    try:
        if credentials is None:
            raise AuthenticationError("Not authenticated")
        return await AuthService(db).get_current_user(credentials.credentials)
    except AuthenticationError as e:
        raise_http_error(e)


# =====================================================
# Pipeline components
# =====================================================
_review_store = ReviewDraftStore(
    max_drafts=settings.REVIEW_DRAFT_MAX,
    ttl_seconds=settings.REVIEW_DRAFT_TTL_SECONDS,
)


def get_review_store() -> ReviewDraftStore:
    """Process-wide store of topic review drafts."""
    return _review_store


def get_topic_extractor() -> TopicExtractionClient:
    """Extraction client configured from settings; overridden in tests."""
    return TopicExtractionClient(ChatCompletionClient.from_settings())


def get_file_reader() -> FileReaderService:
    return FileReaderService()


# =====================================================
# Services
# =====================================================
def get_course_service(db: AsyncSession = Depends(get_db)) -> CourseService:
    return CourseService(db)


def get_topic_service(db: AsyncSession = Depends(get_db)) -> TopicService:
    return TopicService(db)
