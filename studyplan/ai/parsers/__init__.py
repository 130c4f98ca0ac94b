"""
Text Extractors Module

Registry of format-specific text extractors.

Usage:
    from studyplan.ai.parsers import get_parser

    parser = get_parser("pdf")
    result = parser.parse(content, filename="syllabus.pdf")
"""

from typing import Dict, Optional

from studyplan.ai.parsers.base import (
    TextExtractor,
    ParsedDocument,
    PageContent,
    ParserType,
)
from studyplan.ai.parsers.pdf_parser import PDFParser
from studyplan.ai.parsers.docx_parser import DOCXParser


_parsers: Dict[ParserType, TextExtractor] = {}

_DEFAULT_PARSERS = {
    ParserType.PDF: PDFParser,
    ParserType.DOCX: DOCXParser,
}


def get_parser(file_type: str) -> Optional[TextExtractor]:
    """
    Get the extractor registered for a file type.

    Extractors are created lazily and reused.

    Returns:
        The extractor, or None if the type has no decoder
    """
    try:
        parser_type = ParserType(file_type.lower())
    except ValueError:
        return None

    parser = _parsers.get(parser_type)
    if parser is None:
        parser = _DEFAULT_PARSERS[parser_type]()
        _parsers[parser_type] = parser

    return parser


def register_parser(file_type: str, parser: TextExtractor) -> None:
    """Install an extractor for a file type, replacing any existing one."""
    _parsers[ParserType(file_type.lower())] = parser


def reset_parsers() -> None:
    """Forget registered extractors; defaults are recreated on next use."""
    _parsers.clear()


__all__ = [
    "get_parser",
    "register_parser",
    "reset_parsers",
    "TextExtractor",
    "ParsedDocument",
    "PageContent",
    "ParserType",
    "PDFParser",
    "DOCXParser",
]
