"""Tests for syllabus topic extraction (LLM calls go to an httpx MockTransport)."""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import SYLLABUS_TEXT, completion_body
from studyplan.core.errors import (
    ErrorKind,
    MSG_INVALID_CREDENTIALS,
    MSG_NETWORK,
    MSG_QUOTA_EXCEEDED,
    MSG_RATE_LIMITED,
    ParseError,
    ProviderErrorCode,
)
from studyplan.schemas.topic import ExtractedTopic
from studyplan.services.topic_extraction_service import (
    SAMPLE_SYLLABUS,
    TopicExtractionClient,
    calculate_confidence,
    clean_syllabus_text,
    parse_completion,
)


# ──────────────────────────────────────────────────────────────
# clean_syllabus_text
# ──────────────────────────────────────────────────────────────

class TestCleanSyllabusText:
    def test_normalises_line_endings(self):
        assert clean_syllabus_text("a\r\nb\rc") == "a\nb\nc"

    def test_collapses_blank_lines_and_spaces(self):
        assert clean_syllabus_text("Week 1\n\n\n\nWeek 2\t\t  topics") == "Week 1\n\nWeek 2 topics"

    def test_trims_and_truncates(self):
        cleaned = clean_syllabus_text("   " + "x" * 9000 + "   ")
        assert len(cleaned) == 8000
        assert cleaned.startswith("x")


# ──────────────────────────────────────────────────────────────
# parse_completion
# ──────────────────────────────────────────────────────────────

class TestParseCompletion:
    def test_assigns_sequential_ids_and_orders(self):
        topics = parse_completion(completion_body({
            "topics": [{"title": f"Topic {i}"} for i in range(1, 5)]
        }))
        assert [t.id for t in topics] == ["topic-1", "topic-2", "topic-3", "topic-4"]
        assert [t.order for t in topics] == [1, 2, 3, 4]

    def test_titles_are_trimmed(self):
        topics = parse_completion(completion_body({"topics": [{"title": "  Recursion  "}]}))
        assert topics[0].title == "Recursion"

    def test_keywords_keep_only_strings(self):
        topics = parse_completion(completion_body({
            "topics": [{"title": "Sorting", "keywords": ["a", 2, "b", None]}]
        }))
        assert topics[0].keywords == ["a", "b"]

    def test_missing_or_invalid_keywords_become_empty_list(self):
        topics = parse_completion(completion_body({
            "topics": [
                {"title": "No keywords"},
                {"title": "Not a list", "keywords": "graphs"},
                {"title": "Only blanks", "keywords": ["", "  "]},
            ]
        }))
        assert [t.keywords for t in topics] == [[], [], []]

    @pytest.mark.parametrize("bad_entry", [{"title": ""}, {"title": "   "}, {"keywords": ["x"]}, {"title": 42}, "Topic"])
    def test_one_bad_title_fails_whole_batch(self, bad_entry):
        body = completion_body({"topics": [{"title": "Good"}, bad_entry]})
        with pytest.raises(ParseError) as exc_info:
            parse_completion(body)
        assert "Topic 2 missing title" in exc_info.value.message

    def test_empty_topic_list_is_rejected(self):
        with pytest.raises(ParseError, match="No valid topics"):
            parse_completion(completion_body({"topics": []}))

    def test_topics_must_be_a_list(self):
        with pytest.raises(ParseError, match="topics array not found"):
            parse_completion(completion_body({"topics": "Python"}))

    def test_content_must_be_json(self):
        with pytest.raises(ParseError):
            parse_completion(completion_body("this is not json"))

    def test_missing_content(self):
        with pytest.raises(ParseError, match="No content"):
            parse_completion({"choices": []})


# ──────────────────────────────────────────────────────────────
# calculate_confidence
# ──────────────────────────────────────────────────────────────

class TestCalculateConfidence:
    @staticmethod
    def _topics(count, with_keywords):
        return [
            ExtractedTopic(id=f"topic-{i}", title=f"T{i}", order=i, keywords=["k"] if i <= with_keywords else [])
            for i in range(1, count + 1)
        ]

    def test_no_topics_scores_zero(self):
        assert calculate_confidence([]) == 0

    def test_ideal_extraction_scores_100(self):
        assert calculate_confidence(self._topics(6, 6)) == 100

    def test_few_topics_without_keywords(self):
        assert calculate_confidence(self._topics(3, 0)) == 40

    def test_partial_keywords_rounded_to_one_decimal(self):
        # 40 + 30 * (1/3)
        assert calculate_confidence(self._topics(3, 1)) == 50.0

    def test_too_many_topics_loses_count_bonus(self):
        assert calculate_confidence(self._topics(16, 16)) == 70


# ──────────────────────────────────────────────────────────────
# TopicExtractionClient
# ──────────────────────────────────────────────────────────────

class TestExtractTopics:
    async def test_short_text_makes_no_request(self, extractor, fake_llm):
        result = await extractor.extract_topics("   too short   ")
        assert result.success is False
        assert result.error.kind == ErrorKind.VALIDATION
        assert result.topics == []
        assert fake_llm.requests == []

    async def test_missing_api_key_makes_no_request(self, fake_llm):
        client = TopicExtractionClient(fake_llm.client(api_key=""))
        result = await client.extract_topics(SYLLABUS_TEXT)
        assert result.success is False
        assert result.error.code == ProviderErrorCode.INVALID_CREDENTIALS
        assert result.message == MSG_INVALID_CREDENTIALS
        assert fake_llm.requests == []

    async def test_successful_extraction(self, extractor, fake_llm):
        result = await extractor.extract_topics(SYLLABUS_TEXT)

        assert result.success is True
        assert [t.title for t in result.topics] == ["Python Basics", "Control Flow", "Functions"]
        assert [t.order for t in result.topics] == [1, 2, 3]
        assert result.metadata.total_topics == 3
        assert result.metadata.confidence == 70
        assert result.metadata.processing_time >= 0
        assert len(fake_llm.requests) == 1

    async def test_request_shape(self, extractor, fake_llm):
        await extractor.extract_topics(SYLLABUS_TEXT)

        request = fake_llm.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://llm.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer test-key"

        payload = json.loads(request.content)
        assert payload["model"] == "gpt-3.5-turbo"
        assert payload["max_tokens"] == 2000
        assert payload["temperature"] == 0.3
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["messages"][0]["role"] == "system"
        assert "expert educational content analyzer" in payload["messages"][0]["content"]
        assert SYLLABUS_TEXT in payload["messages"][1]["content"]

    async def test_invalid_key_response(self, extractor, fake_llm):
        fake_llm.status_code = 401
        fake_llm.body = {"error": {"message": "Incorrect API key provided", "code": "invalid_api_key"}}

        result = await extractor.extract_topics(SYLLABUS_TEXT)

        assert result.success is False
        assert result.error.kind == ErrorKind.PROVIDER
        assert result.error.status_code == 401
        assert result.error.provider_code == "invalid_api_key"
        assert result.message == MSG_INVALID_CREDENTIALS

    async def test_rate_limited_response(self, extractor, fake_llm):
        fake_llm.status_code = 429
        fake_llm.body = {"error": {"message": "Rate limit reached", "code": "rate_limit_exceeded"}}

        result = await extractor.extract_topics(SYLLABUS_TEXT)

        assert result.error.code == ProviderErrorCode.RATE_LIMITED
        assert result.message == MSG_RATE_LIMITED

    async def test_quota_response(self, extractor, fake_llm):
        fake_llm.status_code = 429
        fake_llm.body = {"error": {"message": "You exceeded your current quota", "type": "insufficient_quota"}}

        result = await extractor.extract_topics(SYLLABUS_TEXT)

        assert result.error.code == ProviderErrorCode.QUOTA_EXCEEDED
        assert result.message == MSG_QUOTA_EXCEEDED

    async def test_server_error_is_wrapped(self, extractor, fake_llm):
        fake_llm.status_code = 500
        fake_llm.body = {"error": {"message": "The server had an error"}}

        result = await extractor.extract_topics(SYLLABUS_TEXT)

        assert result.error.code == ProviderErrorCode.UNKNOWN
        assert result.message.startswith("Topic extraction failed: ")
        assert "500" in result.message

    async def test_network_failure(self, extractor, fake_llm):
        fake_llm.raise_exc = httpx.ConnectError("connection refused")

        result = await extractor.extract_topics(SYLLABUS_TEXT)

        assert result.error.kind == ErrorKind.TRANSPORT
        assert result.message == MSG_NETWORK

    async def test_unparseable_model_output(self, extractor, fake_llm):
        fake_llm.body = completion_body({"topics": [{"title": "Fine"}, {"title": ""}]})

        result = await extractor.extract_topics(SYLLABUS_TEXT)

        assert result.success is False
        assert result.topics == []
        assert result.error.kind == ErrorKind.PARSE

    async def test_sample_data_runs_through_client(self, extractor, fake_llm):
        result = await extractor.test_with_sample_data()
        assert result.success is True
        assert "Computer Science 101" in json.loads(fake_llm.requests[0].content)["messages"][1]["content"]
        assert len(SAMPLE_SYLLABUS.strip()) >= 50
