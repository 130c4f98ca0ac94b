"""
Topic Extraction Service

Extracts an ordered list of candidate topics from syllabus text with a
chat-completion model.

The client is constructed with its ChatCompletionClient (dependency
injection, no global configuration). `extract_topics` never raises for
expected failures; it returns a TopicExtractionResult whose `error`
carries the typed ServiceError.
"""

import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional

from studyplan.ai.llm.openai_client import ChatCompletionClient
from studyplan.ai.prompts.topic_prompts import build_topic_extraction_messages
from studyplan.core.config import settings
from studyplan.core.errors import ParseError, ServiceError, ValidationError, user_message
from studyplan.schemas.topic import ExtractedTopic, TopicExtractionMetadata

logger = logging.getLogger(__name__)

MSG_TEXT_TOO_SHORT = "Syllabus text is too short. Please provide more detailed content."
PARSE_PREFIX = "Failed to parse AI response: "

SAMPLE_SYLLABUS = """
Computer Science 101 - Introduction to Programming

Course Description:
This course provides an introduction to computer programming using Python. Students will learn fundamental programming concepts, data structures, and problem-solving techniques.

Learning Objectives:
- Understand basic programming concepts
- Write and debug Python programs
- Implement data structures and algorithms
- Apply object-oriented programming principles

Course Topics:
Week 1-2: Introduction to Programming and Python Basics
Week 3-4: Variables, Data Types, and Operators
Week 5-6: Control Structures (if/else, loops)
Week 7-8: Functions and Modules
Week 9-10: Lists, Tuples, and Dictionaries
Week 11-12: Object-Oriented Programming
Week 13-14: File I/O and Exception Handling
Week 15-16: Final Projects and Review
"""

_BLANK_LINE_RUNS = re.compile(r"\n{3,}")
_INLINE_WHITESPACE = re.compile(r"[ \t]+")
_TITLE_MAX_LENGTH = 200


# ============================================================
# PURE HELPERS
# ============================================================

def clean_syllabus_text(text: str, max_chars: Optional[int] = None) -> str:
    """Normalise whitespace and cap the length sent to the model."""
    limit = max_chars if max_chars is not None else settings.EXTRACTION_MAX_INPUT_CHARS
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _BLANK_LINE_RUNS.sub("\n\n", text)
    text = _INLINE_WHITESPACE.sub(" ", text)
    return text.strip()[:limit]


def calculate_confidence(topics: List[ExtractedTopic]) -> float:
    """
    Heuristic quality score in [0, 100].

    40 for having any topics, 30 more for a 5-15 topic count, and up to
    30 in proportion to the topics that carry keywords.
    """
    if not topics:
        return 0.0

    score = 40.0
    if 5 <= len(topics) <= 15:
        score += 30
    with_keywords = sum(1 for t in topics if t.keywords)
    score += (with_keywords / len(topics)) * 30

    return round(min(100.0, max(0.0, score)), 1)


def parse_completion(data: Any) -> List[ExtractedTopic]:
    """
    Turn a chat-completion body into ExtractedTopics.

    Any malformed entry fails the whole batch.

    Raises:
        ParseError: Missing content, invalid JSON, bad structure,
            a topic without a title, or no topics at all
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    if not content or not isinstance(content, str):
        raise ParseError(f"{PARSE_PREFIX}No content in OpenAI response")

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(f"{PARSE_PREFIX}{e}") from e

    raw_topics = parsed.get("topics") if isinstance(parsed, dict) else None
    if not isinstance(raw_topics, list):
        raise ParseError(f"{PARSE_PREFIX}Invalid response format: topics array not found")

    topics = []
    for index, raw in enumerate(raw_topics, start=1):
        title = raw.get("title") if isinstance(raw, dict) else None
        if not isinstance(title, str) or not title.strip():
            raise ParseError(f"{PARSE_PREFIX}Topic {index} missing title")

        topics.append(ExtractedTopic(
            id=f"topic-{index}",
            title=title.strip()[:_TITLE_MAX_LENGTH],
            order=index,
            keywords=raw.get("keywords"),
        ))

    if not topics:
        raise ParseError(f"{PARSE_PREFIX}No valid topics extracted")

    return topics


# ============================================================
# RESULT
# ============================================================

@dataclass
class TopicExtractionResult:
    """Tagged outcome of one extraction."""
    success: bool
    topics: List[ExtractedTopic] = field(default_factory=list)
    error: Optional[ServiceError] = None
    metadata: Optional[TopicExtractionMetadata] = None

    @property
    def message(self) -> Optional[str]:
        """User-facing sentence for a failed extraction."""
        return user_message(self.error) if self.error else None

    @classmethod
    def failure(cls, error: ServiceError) -> "TopicExtractionResult":
        return cls(success=False, topics=[], error=error)


# ============================================================
# CLIENT
# ============================================================

class TopicExtractionClient:
    """
    Syllabus -> topics via one chat-completion call.

    Usage:
        client = TopicExtractionClient(ChatCompletionClient.from_settings())
        result = await client.extract_topics(syllabus_text)
        if result.success:
            for topic in result.topics:
                print(topic.order, topic.title)
        else:
            print(result.message)
    """

    def __init__(self, chat_client: ChatCompletionClient):
        self.chat_client = chat_client

    async def extract_topics(self, source_text: Optional[str]) -> TopicExtractionResult:
        start = time.perf_counter()

        if not source_text or len(source_text.strip()) < settings.MIN_SYLLABUS_CHARS:
            return TopicExtractionResult.failure(ValidationError(MSG_TEXT_TOO_SHORT))

        cleaned = clean_syllabus_text(source_text)
        messages = build_topic_extraction_messages(cleaned)

        try:
            data = await self.chat_client.chat_completion(messages)
            topics = parse_completion(data)
        except ServiceError as e:
            logger.warning(f"Topic extraction failed: [{e.kind.value}] {e.message}")
            return TopicExtractionResult.failure(e)

        processing_time = int((time.perf_counter() - start) * 1000)
        confidence = calculate_confidence(topics)

        logger.info(
            f"Extracted {len(topics)} topics in {processing_time}ms "
            f"(confidence {confidence})"
        )

        return TopicExtractionResult(
            success=True,
            topics=topics,
            metadata=TopicExtractionMetadata(
                total_topics=len(topics),
                processing_time=processing_time,
                confidence=confidence,
            ),
        )

    async def test_with_sample_data(self) -> TopicExtractionResult:
        """Run an extraction against the built-in CS101 syllabus."""
        return await self.extract_topics(SAMPLE_SYLLABUS)
