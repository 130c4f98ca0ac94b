"""
Study Planner API

ASGI entry point: `uvicorn studyplan.main:app`.

Wires logging, CORS, optional request logging, the v1 router, health
endpoints, and the handler that turns stray ServiceErrors into JSON.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studyplan.api.v1.router import api_router
from studyplan.core.config import settings
from studyplan.core.errors import ServiceError, http_status_for, user_message
from studyplan.db.database import check_db_connection, init_db
from studyplan.middleware.logging import LoggingMiddleware

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# ============================================================
# Lifespan
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create tables for SQLite databases (Postgres deployments run
    `alembic upgrade head`), probe the database, warn when no LLM key is
    configured.
    """
    logger.info(f"{settings.PROJECT_NAME} {API_VERSION} starting (debug={settings.DEBUG})")

    if settings.DATABASE_URL.startswith("sqlite"):
        await init_db()

    if await check_db_connection():
        logger.info("Database reachable")
    else:
        logger.warning("Database unreachable at startup; requests will fail until it is up")

    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY not set; topic extraction requests will be refused")

    yield

    logger.info(f"{settings.PROJECT_NAME} stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=(
        "Courses, syllabus upload (PDF / DOCX), AI topic extraction with "
        "a review step, and topic management for the study planner app."
    ),
    version=API_VERSION,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ============================================================
# Middleware
# ============================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEBUG else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

if settings.DEBUG:
    app.add_middleware(LoggingMiddleware)

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


# ============================================================
# Health
# ============================================================
@app.get("/", tags=["Health"])
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": API_VERSION,
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """503 when the database is down; `degraded` when no LLM key is set."""
    if not await check_db_connection():
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "disconnected"},
        )

    llm_ready = bool(settings.OPENAI_API_KEY)
    return {
        "status": "healthy" if llm_ready else "degraded",
        "database": "connected",
        "llm": "configured" if llm_ready else "not configured",
    }


# ============================================================
# Exception handlers
# ============================================================
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(
        status_code=http_status_for(exc),
        content={"detail": user_message(exc)},
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
