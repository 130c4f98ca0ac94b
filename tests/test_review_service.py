"""Tests for in-memory topic review drafts."""

from __future__ import annotations

import uuid

import pytest

from studyplan.core.errors import NotFoundError, ValidationError
from studyplan.schemas.topic import ExtractedTopic
from studyplan.services.review_service import (
    MSG_EMPTY_DRAFT,
    ReviewDraftStore,
    TopicReviewDraft,
)
from studyplan.services.topic_service import TopicService


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_draft(user_id=None, course_id=None, titles=("Basics", "Loops", "Functions")) -> TopicReviewDraft:
    topics = [
        ExtractedTopic(id=f"topic-{i}", title=title, order=i, keywords=["k"])
        for i, title in enumerate(titles, start=1)
    ]
    return TopicReviewDraft.from_topics(user_id or uuid.uuid4(), course_id or uuid.uuid4(), topics)


# ──────────────────────────────────────────────────────────────
# TopicReviewDraft
# ──────────────────────────────────────────────────────────────

class TestTopicReviewDraft:
    def test_starts_unchanged(self):
        assert make_draft().has_changes is False

    def test_copies_input_topics(self):
        topics = [ExtractedTopic(id="topic-1", title="Basics", order=1)]
        draft = TopicReviewDraft.from_topics(uuid.uuid4(), uuid.uuid4(), topics)

        draft.rename_topic("topic-1", "Changed")

        assert topics[0].title == "Basics"

    def test_add_topic(self):
        draft = make_draft()

        topic = draft.add_topic()

        assert topic.title == "New Topic"
        assert topic.order == 4
        assert topic.keywords == []
        assert topic.id.startswith("topic-")
        assert draft.has_changes is True

    def test_added_ids_are_unique(self):
        draft = make_draft(titles=())
        ids = {draft.add_topic().id for _ in range(5)}
        assert len(ids) == 5

    def test_rename_trims(self):
        draft = make_draft()
        draft.rename_topic("topic-2", "  While loops ")
        assert draft.topics[1].title == "While loops"

    @pytest.mark.parametrize("title", ["", "   ", "x" * 201])
    def test_rename_rejects_bad_titles(self, title):
        draft = make_draft()
        with pytest.raises(ValidationError):
            draft.rename_topic("topic-1", title)
        assert draft.topics[0].title == "Basics"

    def test_remove_reindexes(self):
        draft = make_draft()

        draft.remove_topic("topic-1")

        assert [(t.title, t.order) for t in draft.topics] == [("Loops", 1), ("Functions", 2)]

    def test_move(self):
        draft = make_draft()

        draft.move_topic("topic-3", 1)

        assert [(t.title, t.order) for t in draft.topics] == [("Functions", 1), ("Basics", 2), ("Loops", 3)]

    def test_move_is_clamped(self):
        draft = make_draft()
        draft.move_topic("topic-1", 99)
        assert [t.title for t in draft.topics] == ["Loops", "Functions", "Basics"]

    def test_unknown_topic(self):
        with pytest.raises(NotFoundError):
            make_draft().remove_topic("topic-404")

    def test_reverting_an_edit_clears_has_changes(self):
        draft = make_draft()
        draft.rename_topic("topic-1", "Other")
        draft.rename_topic("topic-1", "Basics")
        assert draft.has_changes is False


# ──────────────────────────────────────────────────────────────
# ReviewDraftStore
# ──────────────────────────────────────────────────────────────

class TestReviewDraftStore:
    def test_put_and_get(self):
        store = ReviewDraftStore()
        draft = store.put(make_draft())

        assert store.get(draft.user_id, draft.course_id) is draft
        assert store.get(draft.user_id, uuid.uuid4()) is None

    def test_drafts_are_per_user(self):
        store = ReviewDraftStore()
        draft = store.put(make_draft())

        with pytest.raises(NotFoundError):
            store.require(uuid.uuid4(), draft.course_id)

    def test_put_replaces_existing(self):
        store = ReviewDraftStore()
        user_id, course_id = uuid.uuid4(), uuid.uuid4()
        store.put(make_draft(user_id, course_id))
        newer = store.put(make_draft(user_id, course_id, titles=("Only",)))

        assert len(store) == 1
        assert store.require(user_id, course_id) is newer

    def test_apply_runs_edit(self):
        store = ReviewDraftStore()
        draft = store.put(make_draft())

        store.apply(draft.user_id, draft.course_id, lambda d: d.remove_topic("topic-2"))

        assert [t.title for t in draft.topics] == ["Basics", "Functions"]

    def test_apply_without_draft(self):
        with pytest.raises(NotFoundError):
            ReviewDraftStore().apply(uuid.uuid4(), uuid.uuid4(), lambda d: d.add_topic())

    def test_expired_drafts_are_dropped(self):
        clock = FakeClock()
        store = ReviewDraftStore(ttl_seconds=60, clock=clock)
        draft = store.put(make_draft())

        clock.now += 61

        assert store.get(draft.user_id, draft.course_id) is None
        assert len(store) == 0

    def test_edits_keep_draft_alive(self):
        clock = FakeClock()
        store = ReviewDraftStore(ttl_seconds=60, clock=clock)
        draft = store.put(make_draft())

        clock.now += 50
        store.apply(draft.user_id, draft.course_id, lambda d: d.add_topic())
        clock.now += 50

        assert store.get(draft.user_id, draft.course_id) is draft

    def test_oldest_draft_evicted_when_full(self):
        clock = FakeClock()
        store = ReviewDraftStore(max_drafts=2, clock=clock)
        first = store.put(make_draft())
        clock.now += 1
        second = store.put(make_draft())
        clock.now += 1
        third = store.put(make_draft())

        assert len(store) == 2
        assert store.get(first.user_id, first.course_id) is None
        assert store.get(second.user_id, second.course_id) is second
        assert store.get(third.user_id, third.course_id) is third

    def test_discard(self):
        store = ReviewDraftStore()
        draft = store.put(make_draft())

        assert store.discard(draft.user_id, draft.course_id) is True
        assert store.discard(draft.user_id, draft.course_id) is False


class TestCommit:
    async def test_commit_persists_and_drops_draft(self, db_session, user, course):
        store = ReviewDraftStore()
        draft = store.put(make_draft(user.id, course.id))
        store.apply(user.id, course.id, lambda d: d.move_topic("topic-3", 1))

        saved = await store.commit(user.id, course.id, TopicService(db_session))

        assert [(t.title, t.order_index) for t in saved] == [("Functions", 1), ("Basics", 2), ("Loops", 3)]
        assert store.get(user.id, course.id) is None
        assert draft.topics[0].title == "Functions"

    async def test_empty_draft_is_refused(self, db_session, user, course):
        store = ReviewDraftStore()
        store.put(make_draft(user.id, course.id, titles=()))

        with pytest.raises(ValidationError) as exc_info:
            await store.commit(user.id, course.id, TopicService(db_session))

        assert exc_info.value.message == MSG_EMPTY_DRAFT
        assert store.get(user.id, course.id) is not None

    async def test_commit_without_draft(self, db_session, user, course):
        with pytest.raises(NotFoundError):
            await ReviewDraftStore().commit(user.id, course.id, TopicService(db_session))
