"""
Course Endpoints

- POST    /courses              - Create a course
- GET     /courses              - The caller's courses, newest first
- GET     /courses/{course_id}  - One course
- PATCH   /courses/{course_id}  - Partial update
- DELETE  /courses/{course_id}  - Delete with all topics
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from studyplan.api.deps import get_course_service, get_current_user, raise_http_error
from studyplan.core.errors import ServiceError
from studyplan.models.user import User
from studyplan.schemas.course import CourseCreate, CourseResponse, CourseUpdate
from studyplan.services.course_service import CourseService

router = APIRouter(tags=["Courses"])

_NOT_FOUND = {404: {"description": "Course not found or access denied"}}


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"description": "Invalid name, end date or description"}},
)
async def create_course(
    payload: CourseCreate,
    current_user: User = Depends(get_current_user),
    courses: CourseService = Depends(get_course_service),
):
    """New courses start with `topics_extracted = false`."""
    return await courses.create_course(payload, current_user.id)


@router.get("", response_model=List[CourseResponse])
async def list_courses(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    courses: CourseService = Depends(get_course_service),
):
    return await courses.get_user_courses(current_user.id, skip, limit)


@router.get("/{course_id}", response_model=CourseResponse, responses=_NOT_FOUND)
async def get_course(
    course_id: UUID,
    current_user: User = Depends(get_current_user),
    courses: CourseService = Depends(get_course_service),
):
    try:
        return await courses.get_course(course_id, current_user.id)
    except ServiceError as e:
        raise_http_error(e)


@router.patch("/{course_id}", response_model=CourseResponse, responses=_NOT_FOUND)
async def update_course(
    course_id: UUID,
    payload: CourseUpdate,
    current_user: User = Depends(get_current_user),
    courses: CourseService = Depends(get_course_service),
):
    """Only the fields present in the body change."""
    try:
        return await courses.update_course(course_id, payload, current_user.id)
    except ServiceError as e:
        raise_http_error(e)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_NOT_FOUND)
async def delete_course(
    course_id: UUID,
    current_user: User = Depends(get_current_user),
    courses: CourseService = Depends(get_course_service),
):
    """Topics go with the course (ON DELETE CASCADE)."""
    try:
        await courses.delete_course(course_id, current_user.id)
    except ServiceError as e:
        raise_http_error(e)
