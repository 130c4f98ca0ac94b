"""Version 1 API: every endpoint module mounted under `/api/v1`."""

from fastapi import APIRouter

from studyplan.api.v1.endpoints import auth, courses, files, topics

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth")
api_router.include_router(courses.router, prefix="/courses")

# These declare full paths themselves (/files/read, /courses/{id}/topics, /topics/{id})
api_router.include_router(files.router)
api_router.include_router(topics.router)
