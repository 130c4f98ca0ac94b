"""End-to-end tests through the FastAPI app (LLM and file decoding faked)."""

from __future__ import annotations

import uuid

from conftest import SYLLABUS_TEXT, FixtureExtractor, future_date, register_and_login
from studyplan.ai.parsers import register_parser

PDF_BYTES = b"%PDF-1.4\n%fixture\n"


def create_course(client, headers, name: str = "Introduction to Programming") -> dict:
    response = client.post("/api/v1/courses", json={"name": name, "end_date": future_date()}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def extract(client, headers, course_id: str, text: str = SYLLABUS_TEXT):
    return client.post(f"/api/v1/courses/{course_id}/topics/extract", json={"text": text}, headers=headers)


# ──────────────────────────────────────────────────────────────
# Health and auth
# ──────────────────────────────────────────────────────────────

class TestHealthAndAuth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_register_login_me(self, client):
        register_and_login(client, "ada@example.com")

        response = client.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "SecurePass123"})
        assert response.status_code == 200
        tokens = response.json()

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == "ada@example.com"
        assert me.json()["full_name"] == "Emily Chen"

        refreshed = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert refreshed.status_code == 200
        assert refreshed.json()["access_token"]

    def test_duplicate_email(self, client):
        register_and_login(client, "dup@example.com")
        response = client.post("/api/v1/auth/register", json={
            "email": "dup@example.com",
            "password": "SecurePass123",
            "first_name": "Second",
            "last_name": "User",
        })
        assert response.status_code == 400

    def test_wrong_password(self, client):
        register_and_login(client, "pw@example.com")
        response = client.post("/api/v1/auth/login", json={"email": "pw@example.com", "password": "WrongPass999"})
        assert response.status_code == 401

    def test_courses_require_token(self, client):
        assert client.get("/api/v1/courses").status_code == 401


# ──────────────────────────────────────────────────────────────
# Courses
# ──────────────────────────────────────────────────────────────

class TestCourses:
    def test_crud(self, client, auth_headers):
        course = create_course(client, auth_headers)
        assert course["topics_extracted"] is False

        listed = client.get("/api/v1/courses", headers=auth_headers).json()
        assert [c["id"] for c in listed] == [course["id"]]

        patched = client.patch(
            f"/api/v1/courses/{course['id']}", json={"description": "Fall"}, headers=auth_headers
        )
        assert patched.json()["description"] == "Fall"

        assert client.delete(f"/api/v1/courses/{course['id']}", headers=auth_headers).status_code == 204
        assert client.get(f"/api/v1/courses/{course['id']}", headers=auth_headers).status_code == 404

    def test_invalid_course(self, client, auth_headers):
        response = client.post(
            "/api/v1/courses", json={"name": "AB", "end_date": "2000-01-01"}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_foreign_course_looks_missing(self, client, auth_headers):
        course = create_course(client, auth_headers)
        intruder = register_and_login(client, "intruder@example.com")

        response = client.get(f"/api/v1/courses/{course['id']}", headers=intruder)

        assert response.status_code == 404
        assert response.json()["detail"] == "Course not found or access denied"


# ──────────────────────────────────────────────────────────────
# Extraction and review
# ──────────────────────────────────────────────────────────────

class TestExtractionReview:
    def test_extract_review_commit(self, client, auth_headers):
        course = create_course(client, auth_headers)
        course_id = course["id"]
        base = f"/api/v1/courses/{course_id}/topics"

        response = extract(client, auth_headers, course_id)
        assert response.status_code == 201, response.text
        draft = response.json()
        assert [t["title"] for t in draft["topics"]] == ["Python Basics", "Control Flow", "Functions"]
        assert draft["has_changes"] is False
        assert draft["metadata"]["total_topics"] == 3

        # nothing is saved before commit
        assert client.get(base, headers=auth_headers).json()["total"] == 0

        added = client.post(f"{base}/draft/topics", json={"title": "Recursion"}, headers=auth_headers).json()
        new_id = added["topics"][-1]["id"]
        assert added["has_changes"] is True

        client.patch(f"{base}/draft/topics/{new_id}", json={"position": 1}, headers=auth_headers)
        client.patch(f"{base}/draft/topics/topic-2", json={"title": "Loops"}, headers=auth_headers)
        removed = client.delete(f"{base}/draft/topics/topic-3", headers=auth_headers).json()
        assert [(t["title"], t["order"]) for t in removed["topics"]] == [
            ("Recursion", 1), ("Python Basics", 2), ("Loops", 3)
        ]

        committed = client.post(f"{base}/draft/commit", headers=auth_headers)
        assert committed.status_code == 200, committed.text
        saved = committed.json()["topics"]
        assert [(t["title"], t["order_index"]) for t in saved] == [
            ("Recursion", 1), ("Python Basics", 2), ("Loops", 3)
        ]
        assert saved[1]["content"] == "syntax, interpreter"
        assert saved[1]["keywords"] == ["syntax", "interpreter"]

        assert client.get(f"{base}/draft", headers=auth_headers).status_code == 404
        refreshed = client.get(f"/api/v1/courses/{course_id}", headers=auth_headers).json()
        assert refreshed["topics_extracted"] is True

    def test_short_text_is_rejected_without_calling_llm(self, client, auth_headers, fake_llm):
        course = create_course(client, auth_headers)

        response = extract(client, auth_headers, course["id"], text="too short")

        assert response.status_code == 400
        assert fake_llm.requests == []

    def test_provider_rate_limit(self, client, auth_headers, fake_llm):
        course = create_course(client, auth_headers)
        fake_llm.status_code = 429
        fake_llm.body = {"error": {"message": "Rate limit reached", "code": "rate_limit_exceeded"}}

        response = extract(client, auth_headers, course["id"])

        assert response.status_code == 429
        assert response.json()["detail"] == "Too many requests. Please wait a moment and try again."

    def test_bad_model_output(self, client, auth_headers, fake_llm):
        course = create_course(client, auth_headers)
        fake_llm.body = {"choices": [{"message": {"content": "{\"topics\": []}"}}]}

        response = extract(client, auth_headers, course["id"])

        assert response.status_code == 422

    def test_empty_draft_cannot_be_committed(self, client, auth_headers):
        course = create_course(client, auth_headers)
        base = f"/api/v1/courses/{course['id']}/topics"
        draft = extract(client, auth_headers, course["id"]).json()
        for topic in draft["topics"]:
            client.delete(f"{base}/draft/topics/{topic['id']}", headers=auth_headers)

        response = client.post(f"{base}/draft/commit", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Please add at least one topic before saving."

    def test_extract_into_foreign_course(self, client, auth_headers, fake_llm):
        course = create_course(client, auth_headers)
        intruder = register_and_login(client, "intruder@example.com")

        response = extract(client, intruder, course["id"])

        assert response.status_code == 404
        assert fake_llm.requests == []

    def test_discard_draft(self, client, auth_headers):
        course = create_course(client, auth_headers)
        base = f"/api/v1/courses/{course['id']}/topics"
        extract(client, auth_headers, course["id"])

        assert client.delete(f"{base}/draft", headers=auth_headers).status_code == 204
        assert client.get(f"{base}/draft", headers=auth_headers).status_code == 404

    def test_syllabus_upload(self, client, auth_headers, fake_llm):
        register_parser("pdf", FixtureExtractor(SYLLABUS_TEXT))
        course = create_course(client, auth_headers)

        response = client.post(
            f"/api/v1/courses/{course['id']}/syllabus",
            files={"file": ("cs101 syllabus.pdf", PDF_BYTES, "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        assert len(response.json()["topics"]) == 3
        sent = fake_llm.requests[0].content.decode()
        assert "Week 3: Control flow with loops" in sent
        refreshed = client.get(f"/api/v1/courses/{course['id']}", headers=auth_headers).json()
        assert refreshed["syllabus_url"] == "cs101_syllabus.pdf"


# ──────────────────────────────────────────────────────────────
# Saved topics and files
# ──────────────────────────────────────────────────────────────

class TestSavedTopics:
    def test_replace_create_update_delete(self, client, auth_headers):
        course = create_course(client, auth_headers)
        base = f"/api/v1/courses/{course['id']}/topics"

        replaced = client.put(base, json={"topics": [
            {"title": "Sets", "keywords": ["union"]},
            {"title": "Maps"},
        ]}, headers=auth_headers)
        assert replaced.status_code == 200
        assert replaced.json()["total"] == 2

        created = client.post(base, json={"title": "Trees", "order_index": 1}, headers=auth_headers)
        assert created.status_code == 201
        topic_id = created.json()["id"]

        moved = client.patch(f"/api/v1/topics/{topic_id}", json={"order_index": 3}, headers=auth_headers)
        assert moved.json()["order_index"] == 3

        assert client.delete(f"/api/v1/topics/{topic_id}", headers=auth_headers).status_code == 204
        listed = client.get(base, headers=auth_headers).json()["topics"]
        assert [(t["title"], t["order_index"]) for t in listed] == [("Sets", 1), ("Maps", 2)]

    def test_unknown_topic(self, client, auth_headers):
        response = client.delete(f"/api/v1/topics/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404


class TestFiles:
    def test_read_file(self, client, auth_headers):
        register_parser("pdf", FixtureExtractor(SYLLABUS_TEXT))

        response = client.post(
            "/api/v1/files/read",
            files={"file": ("syllabus.pdf", PDF_BYTES, "application/pdf")},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["text"] == SYLLABUS_TEXT
        assert body["metadata"]["file_size"] == len(PDF_BYTES)

    def test_unsupported_upload(self, client, auth_headers):
        response = client.post(
            "/api/v1/files/read",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )
        assert response.status_code == 400
