"""AI Prompts Module"""

from studyplan.ai.prompts.topic_prompts import (
    TOPIC_EXTRACTION_SYSTEM_PROMPT,
    build_topic_extraction_prompt,
    build_topic_extraction_messages,
)

__all__ = [
    "TOPIC_EXTRACTION_SYSTEM_PROMPT",
    "build_topic_extraction_prompt",
    "build_topic_extraction_messages",
]
