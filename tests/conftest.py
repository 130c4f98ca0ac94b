"""Shared pytest fixtures for the Study Planner test suite."""

from __future__ import annotations

import json
import os
from datetime import date, timedelta

# Settings are read at import time; point them at throwaway values first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("OPENAI_API_KEY", "")

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from studyplan.ai.llm.openai_client import ChatCompletionClient
from studyplan.ai.parsers import ParsedDocument, ParserType, TextExtractor, reset_parsers
from studyplan.db.database import Base, build_engine, build_sessionmaker, get_db, init_db
from studyplan.models import Course, User
from studyplan.services.review_service import ReviewDraftStore
from studyplan.services.topic_extraction_service import TopicExtractionClient


SYLLABUS_TEXT = (
    "Introduction to Programming. Week 1: Python basics and tooling. "
    "Week 2: Variables and data types. Week 3: Control flow with loops. "
    "Week 4: Functions and modules. Week 5: Lists and dictionaries."
)


# ──────────────────────────────────────────────────────────────
# LLM fakes
# ──────────────────────────────────────────────────────────────

def completion_body(payload) -> dict:
    """Chat-completion response whose message content is `payload` as JSON."""
    content = payload if isinstance(payload, str) else json.dumps(payload)
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeLLM:
    """Records requests and answers with a configurable response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: dict = completion_body({
            "topics": [
                {"title": "Python Basics", "keywords": ["syntax", "interpreter"]},
                {"title": "Control Flow", "keywords": ["loops", "conditionals"]},
                {"title": "Functions", "keywords": ["parameters"]},
            ]
        })
        self.raise_exc: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_exc is not None:
            raise self.raise_exc
        return httpx.Response(self.status_code, json=self.body)

    def client(self, api_key: str | None = "test-key") -> ChatCompletionClient:
        return ChatCompletionClient(
            api_key=api_key,
            base_url="https://llm.test/v1",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def extractor(fake_llm) -> TopicExtractionClient:
    return TopicExtractionClient(fake_llm.client())


# ──────────────────────────────────────────────────────────────
# Text extractor fakes
# ──────────────────────────────────────────────────────────────

class FixtureExtractor(TextExtractor):
    """Returns canned text for any content."""

    def __init__(self, text: str, parser_type: ParserType = ParserType.PDF, success: bool = True):
        self.text = text
        self.parser_type = parser_type
        self.success = success
        self.calls = 0

    @property
    def supported_types(self):
        return [self.parser_type]

    def parse(self, content, filename=None):
        self.calls += 1
        if not self.success:
            return ParsedDocument.from_error("fixture failure")
        return ParsedDocument(text=self.text)


@pytest.fixture(autouse=True)
def _reset_parser_registry():
    yield
    reset_parsers()


# ──────────────────────────────────────────────────────────────
# Database
# ──────────────────────────────────────────────────────────────

@pytest.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'service.db'}", poolclass=NullPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    session_factory = build_sessionmaker(db_engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def user(db_session) -> User:
    user = User(email="owner@example.com", password_hash="x", first_name="Ada", last_name="Lovelace")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def other_user(db_session) -> User:
    user = User(email="other@example.com", password_hash="x", first_name="Alan", last_name="Turing")
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def course(db_session, user) -> Course:
    course = Course(
        user_id=user.id,
        name="Introduction to Programming",
        end_date=date.today() + timedelta(days=90),
    )
    db_session.add(course)
    await db_session.commit()
    return course


# ──────────────────────────────────────────────────────────────
# API client
# ──────────────────────────────────────────────────────────────

@pytest.fixture
def review_store() -> ReviewDraftStore:
    return ReviewDraftStore(max_drafts=50, ttl_seconds=3600)


@pytest.fixture
def client(tmp_path, fake_llm, review_store):
    from fastapi.testclient import TestClient

    from studyplan.api.deps import get_review_store, get_topic_extractor
    from studyplan.main import app

    db_file = tmp_path / "api.db"
    sync_engine = create_engine(f"sqlite:///{db_file}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    # NullPool: TestClient runs the app on its own event loop
    engine = build_engine(f"sqlite+aiosqlite:///{db_file}", poolclass=NullPool)
    session_factory = build_sessionmaker(engine)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_topic_extractor] = lambda: TopicExtractionClient(fake_llm.client())
    app.dependency_overrides[get_review_store] = lambda: review_store

    yield TestClient(app)

    app.dependency_overrides.clear()


def register_and_login(client, email: str = "student@example.com") -> dict:
    """Register a user through the API and return bearer auth headers."""
    response = client.post("/api/v1/auth/register", json={
        "email": email,
        "password": "SecurePass123",
        "first_name": "Emily",
        "last_name": "Chen",
    })
    assert response.status_code == 201, response.text
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client) -> dict:
    return register_and_login(client)


def future_date(days: int = 90) -> str:
    return (date.today() + timedelta(days=days)).isoformat()
