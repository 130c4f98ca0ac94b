"""
LLM Module

Chat-completion client used for syllabus topic extraction.
"""

from studyplan.ai.llm.openai_client import (
    ChatCompletionClient,
    classify_provider_error,
)

__all__ = [
    "ChatCompletionClient",
    "classify_provider_error",
]
