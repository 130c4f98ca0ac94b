"""
Topic Endpoints

HTTP API for topic extraction, review and management.

Endpoints:
----------
- POST    /courses/{course_id}/syllabus                              - Upload syllabus, extract topics into a review draft
- POST    /courses/{course_id}/topics/extract                        - Extract topics from raw text into a review draft
- GET     /courses/{course_id}/topics/draft                          - Current review draft
- DELETE  /courses/{course_id}/topics/draft                          - Discard review draft
- POST    /courses/{course_id}/topics/draft/topics                   - Add a topic to the draft
- PATCH   /courses/{course_id}/topics/draft/topics/{topic_id}        - Rename / move a draft topic
- DELETE  /courses/{course_id}/topics/draft/topics/{topic_id}        - Remove a draft topic
- POST    /courses/{course_id}/topics/draft/commit                   - Save the draft as the course's topics
- GET     /courses/{course_id}/topics                                - List saved topics
- PUT     /courses/{course_id}/topics                                - Replace all saved topics
- POST    /courses/{course_id}/topics                                - Add one saved topic
- PATCH   /topics/{topic_id}                                         - Update a saved topic
- DELETE  /topics/{topic_id}                                         - Delete a saved topic
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from studyplan.api.deps import (
    get_course_service,
    get_current_user,
    get_file_reader,
    get_review_store,
    get_topic_extractor,
    get_topic_service,
    raise_http_error,
)
from studyplan.api.v1.endpoints.files import read_upload
from studyplan.core.errors import ServiceError, classify_error_message
from studyplan.models.topic import Topic
from studyplan.models.user import User
from studyplan.schemas.topic import (
    DraftTopicCreate,
    DraftTopicUpdate,
    ReviewDraftResponse,
    TopicCreate,
    TopicExtractRequest,
    TopicListResponse,
    TopicResponse,
    TopicSaveRequest,
    TopicUpdate,
)
from studyplan.services.course_service import CourseService
from studyplan.services.file_reader_service import FileReaderService
from studyplan.services.review_service import ReviewDraftStore, TopicReviewDraft
from studyplan.services.topic_extraction_service import (
    TopicExtractionClient,
    TopicExtractionResult,
)
from studyplan.services.topic_service import TopicService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Topics"])


def _topic_list(topics: List[Topic]) -> TopicListResponse:
    return TopicListResponse(
        topics=[TopicResponse.model_validate(t) for t in topics],
        total=len(topics),
    )


async def _extract_into_draft(
    text: str,
    course_id: UUID,
    user: User,
    extractor: TopicExtractionClient,
    store: ReviewDraftStore,
) -> ReviewDraftResponse:
    try:
        result: TopicExtractionResult = await extractor.extract_topics(text)
    except Exception as e:
        # Typed failures come back inside the result; anything else is unexpected
        logger.exception(f"Unexpected topic extraction failure for course {course_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=classify_error_message(str(e)),
        )

    if not result.success:
        raise_http_error(result.error)

    draft = store.put(TopicReviewDraft.from_topics(
        user_id=user.id,
        course_id=course_id,
        topics=result.topics,
        metadata=result.metadata,
    ))
    return draft.to_response()


# ============================================================
# EXTRACTION
# ============================================================

@router.post(
    "/courses/{course_id}/syllabus",
    response_model=ReviewDraftResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a syllabus and extract topics",
    description="""
    Reads the uploaded PDF/DOCX, extracts topics with AI and opens a
    review draft. Nothing is saved until the draft is committed.
    """,
)
async def upload_syllabus(
    course_id: UUID,
    file: UploadFile = File(..., description="PDF or DOCX syllabus"),
    current_user: User = Depends(get_current_user),
    course_service: CourseService = Depends(get_course_service),
    reader: FileReaderService = Depends(get_file_reader),
    extractor: TopicExtractionClient = Depends(get_topic_extractor),
    store: ReviewDraftStore = Depends(get_review_store),
):
    try:
        await course_service.get_course(course_id, current_user.id)
    except ServiceError as e:
        raise_http_error(e)

    read_result = await read_upload(file, reader)
    if not read_result.success:
        raise_http_error(read_result.error)

    draft = await _extract_into_draft(
        read_result.text, course_id, current_user, extractor, store
    )

    await course_service.set_syllabus_reference(
        course_id, read_result.metadata.file_name, current_user.id
    )
    return draft


@router.post(
    "/courses/{course_id}/topics/extract",
    response_model=ReviewDraftResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Extract topics from syllabus text",
)
async def extract_topics(
    course_id: UUID,
    request: TopicExtractRequest,
    current_user: User = Depends(get_current_user),
    course_service: CourseService = Depends(get_course_service),
    extractor: TopicExtractionClient = Depends(get_topic_extractor),
    store: ReviewDraftStore = Depends(get_review_store),
):
    try:
        await course_service.get_course(course_id, current_user.id)
    except ServiceError as e:
        raise_http_error(e)

    return await _extract_into_draft(
        request.text, course_id, current_user, extractor, store
    )


# ============================================================
# REVIEW DRAFT
# ============================================================

@router.get(
    "/courses/{course_id}/topics/draft",
    response_model=ReviewDraftResponse,
    summary="Get the topics awaiting review",
)
async def get_draft(
    course_id: UUID,
    current_user: User = Depends(get_current_user),
    store: ReviewDraftStore = Depends(get_review_store),
):
    try:
        return store.require(current_user.id, course_id).to_response()
    except ServiceError as e:
        raise_http_error(e)


@router.delete(
    "/courses/{course_id}/topics/draft",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Discard the review draft",
)
async def discard_draft(
    course_id: UUID,
    current_user: User = Depends(get_current_user),
    store: ReviewDraftStore = Depends(get_review_store),
):
    store.discard(current_user.id, course_id)
    return None


@router.post(
    "/courses/{course_id}/topics/draft/topics",
    response_model=ReviewDraftResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a topic to the review draft",
)
async def add_draft_topic(
    course_id: UUID,
    request: DraftTopicCreate = DraftTopicCreate(),
    current_user: User = Depends(get_current_user),
    store: ReviewDraftStore = Depends(get_review_store),
):
    def edit(draft: TopicReviewDraft) -> ReviewDraftResponse:
        draft.add_topic(request.title)
        return draft.to_response()

    try:
        return store.apply(current_user.id, course_id, edit)
    except ServiceError as e:
        raise_http_error(e)


@router.patch(
    "/courses/{course_id}/topics/draft/topics/{topic_id}",
    response_model=ReviewDraftResponse,
    summary="Rename or move a draft topic",
)
async def update_draft_topic(
    course_id: UUID,
    topic_id: str,
    request: DraftTopicUpdate,
    current_user: User = Depends(get_current_user),
    store: ReviewDraftStore = Depends(get_review_store),
):
    def edit(draft: TopicReviewDraft) -> ReviewDraftResponse:
        if request.title is not None:
            draft.rename_topic(topic_id, request.title)
        if request.position is not None:
            draft.move_topic(topic_id, request.position)
        return draft.to_response()

    try:
        return store.apply(current_user.id, course_id, edit)
    except ServiceError as e:
        raise_http_error(e)


@router.delete(
    "/courses/{course_id}/topics/draft/topics/{topic_id}",
    response_model=ReviewDraftResponse,
    summary="Remove a topic from the review draft",
)
async def remove_draft_topic(
    course_id: UUID,
    topic_id: str,
    current_user: User = Depends(get_current_user),
    store: ReviewDraftStore = Depends(get_review_store),
):
    def edit(draft: TopicReviewDraft) -> ReviewDraftResponse:
        draft.remove_topic(topic_id)
        return draft.to_response()

    try:
        return store.apply(current_user.id, course_id, edit)
    except ServiceError as e:
        raise_http_error(e)


@router.post(
    "/courses/{course_id}/topics/draft/commit",
    response_model=TopicListResponse,
    summary="Save the reviewed topics",
    description="""
    Replaces the course's topics with the reviewed list in one
    transaction and marks the course as having extracted topics.
    """,
)
async def commit_draft(
    course_id: UUID,
    current_user: User = Depends(get_current_user),
    store: ReviewDraftStore = Depends(get_review_store),
    service: TopicService = Depends(get_topic_service),
):
    try:
        topics = await store.commit(current_user.id, course_id, service)
    except ServiceError as e:
        raise_http_error(e)
    return _topic_list(topics)


# ============================================================
# SAVED TOPICS
# ============================================================

@router.get(
    "/courses/{course_id}/topics",
    response_model=TopicListResponse,
    summary="List topics for a course",
)
async def list_topics(
    course_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TopicService = Depends(get_topic_service),
):
    try:
        topics = await service.get_topics_for_course(course_id, current_user.id)
    except ServiceError as e:
        raise_http_error(e)
    return _topic_list(topics)


@router.put(
    "/courses/{course_id}/topics",
    response_model=TopicListResponse,
    summary="Replace all topics of a course",
)
async def save_topics(
    course_id: UUID,
    request: TopicSaveRequest,
    current_user: User = Depends(get_current_user),
    service: TopicService = Depends(get_topic_service),
):
    try:
        topics = await service.save_topics_for_course(
            course_id, request.topics, current_user.id
        )
    except ServiceError as e:
        raise_http_error(e)
    return _topic_list(topics)


@router.post(
    "/courses/{course_id}/topics",
    response_model=TopicResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a topic to a course",
)
async def create_topic(
    course_id: UUID,
    request: TopicCreate,
    current_user: User = Depends(get_current_user),
    service: TopicService = Depends(get_topic_service),
):
    try:
        topic = await service.create_topic(course_id, request, current_user.id)
    except ServiceError as e:
        raise_http_error(e)
    return TopicResponse.model_validate(topic)


@router.patch(
    "/topics/{topic_id}",
    response_model=TopicResponse,
    summary="Update a topic",
)
async def update_topic(
    topic_id: UUID,
    request: TopicUpdate,
    current_user: User = Depends(get_current_user),
    service: TopicService = Depends(get_topic_service),
):
    try:
        topic = await service.update_topic(topic_id, request, current_user.id)
    except ServiceError as e:
        raise_http_error(e)
    return TopicResponse.model_validate(topic)


@router.delete(
    "/topics/{topic_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a topic",
)
async def delete_topic(
    topic_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TopicService = Depends(get_topic_service),
):
    try:
        await service.delete_topic(topic_id, current_user.id)
    except ServiceError as e:
        raise_http_error(e)
    return None
