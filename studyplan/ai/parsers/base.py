"""
Text extractor interface.

An extractor turns the bytes of one document format into plain text.
The file reader only talks to this interface, so fixture extractors can
be registered in place of the real decoders.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional



class ParserType(str, Enum):
    PDF = "pdf"
    DOCX = "docx"


@dataclass
class PageContent:
    """One PDF page, or the whole body of a DOCX (numbered 1)."""
    page_number: int
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ParsedDocument:
    """
    Decoder output.

    `success=False` means the bytes could not be decoded at all; `error`
    then says why. A decodable file with no text layer is `success=True`
    with empty `text` and an explanatory `error`.
    """
    text: str
    pages: List[PageContent] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error: Optional[str] = None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @classmethod
    def from_error(cls, error_message: str) -> "ParsedDocument":
        return cls(text="", success=False, error=error_message)


class TextExtractor(ABC):
    """Base class for format decoders. `parse` reports failures instead of raising."""

    @property
    @abstractmethod
    def supported_types(self) -> List[ParserType]:
        ...

    @abstractmethod
    def parse(self, content: bytes, filename: Optional[str] = None) -> ParsedDocument:
        ...

    def can_parse(self, file_type: str) -> bool:
        try:
            return ParserType(file_type.lower()) in self.supported_types
        except ValueError:
            return False

    def _clean_text(self, text: str) -> str:
        # Per-page tidy only; the file reader does the full normalisation.
        if not text:
            return ""
        lines = (" ".join(line.split()) for line in text.replace("\x00", "").split("\n"))
        return "\n".join(lines).strip()

    def _fallback_title(self, filename: str) -> str:
        stem = filename.rsplit(".", 1)[0]
        return stem.replace("_", " ").replace("-", " ")
