"""
File Reader Service

Turns an uploaded syllabus (PDF / DOCX) into cleaned plain text.

Flow:
    validate declared size and type -> load bytes -> sniff content ->
    decode with the registered TextExtractor -> clean -> length check

Every outcome is reported as a FileReadResult; nothing is raised to the
caller.
"""

import asyncio
import logging
import re
import time
import unicodedata
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import unquote, urlparse

import aiofiles
import httpx

from studyplan.ai.parsers import TextExtractor, get_parser
from studyplan.core.config import settings
from studyplan.core.errors import (
    NotFoundError,
    ParseError,
    ServiceError,
    TransportError,
    ValidationError,
    user_message,
)
from studyplan.schemas.document import FileInfo, FileReadMetadata, FileType
from studyplan.utils.file_utils import (
    content_matches_type,
    format_file_size,
    validate_file_size,
    validate_file_type,
)

logger = logging.getLogger(__name__)

MSG_NO_MEANINGFUL_TEXT = (
    "Could not extract meaningful text from the file. "
    "The file may be image-based or corrupted."
)
MSG_LEGACY_DOC = (
    "Legacy .doc files are not supported. "
    "Please save the document as .docx or PDF and try again."
)

_HORIZONTAL_SPACE = re.compile(r"[^\S\n]")
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n]")
_SPACE_RUNS = re.compile(r" {2,}")
_BLANK_LINE_RUNS = re.compile(r"\n{3,}")


# ============================================================
# TEXT CLEANUP
# ============================================================

def clean_extracted_text(text: Optional[str], max_chars: Optional[int] = None) -> str:
    """
    Normalise decoded document text.

    Compatibility forms are folded (NFKC, so ligatures survive), line
    endings become `\\n` and every other whitespace character a space.
    Anything still outside printable ASCII is dropped, space runs and 3+
    newlines are collapsed, and the result is trimmed and truncated.
    Applying it twice gives the same result as applying it once.
    """
    if not text:
        return ""

    limit = max_chars if max_chars is not None else settings.MAX_EXTRACTED_TEXT_CHARS

    text = unicodedata.normalize("NFKC", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _NON_PRINTABLE.sub("", text)
    text = _SPACE_RUNS.sub(" ", text)
    text = _BLANK_LINE_RUNS.sub("\n\n", text)
    text = text.strip()
    return text[:limit].strip()


# ============================================================
# RESULT
# ============================================================

@dataclass
class FileReadResult:
    """Tagged outcome of reading one file."""
    success: bool
    text: str = ""
    error: Optional[ServiceError] = None
    metadata: Optional[FileReadMetadata] = None

    @property
    def message(self) -> Optional[str]:
        return user_message(self.error) if self.error else None

    @classmethod
    def failure(cls, error: ServiceError) -> "FileReadResult":
        return cls(success=False, error=error)


# ============================================================
# SERVICE
# ============================================================

class FileReaderService:
    """
    Reads syllabus files into text.

    Args:
        parser_lookup: Resolves a file type to a TextExtractor
            (defaults to the parser registry)
        transport: Optional httpx transport for remote URIs
    """

    def __init__(
        self,
        parser_lookup: Callable[[str], Optional[TextExtractor]] = get_parser,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.parser_lookup = parser_lookup
        self._transport = transport

    async def read_file_text(
        self,
        file: FileInfo,
        content: Optional[bytes] = None
    ) -> FileReadResult:
        """
        Extract cleaned text from a syllabus file.

        Args:
            file: Declared file info (uri, name, MIME type, size)
            content: File bytes when already in memory (uploads);
                otherwise they are loaded from `file.uri`
        """
        start = time.perf_counter()

        try:
            file_type = self._validate(file)

            if content is None:
                content = await self._load_content(file.uri)

            text, page_count = await self._decode(file, file_type, content)

        except ServiceError as e:
            logger.warning(f"File read failed for {file.name}: [{e.kind.value}] {e.message}")
            return FileReadResult.failure(e)

        processing_time = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"File read: {file.name} ({format_file_size(len(content))}), "
            f"{len(text)} characters in {processing_time}ms"
        )

        return FileReadResult(
            success=True,
            text=text,
            metadata=FileReadMetadata(
                file_name=file.name,
                file_size=file.size,
                file_type=file.type or file_type.value,
                processing_time=processing_time,
                text_length=len(text),
                page_count=page_count,
            ),
        )

    # ============================================================
    # HELPERS
    # ============================================================

    def _validate(self, file: FileInfo) -> FileType:
        size_ok, size_error = validate_file_size(file.size)
        if not size_ok:
            raise ValidationError(size_error)

        file_type, type_error = validate_file_type(file.type, file.name)
        if file_type is None:
            raise ValidationError(type_error)

        if file_type == FileType.DOC:
            raise ValidationError(MSG_LEGACY_DOC)

        return file_type

    async def _decode(self, file: FileInfo, file_type: FileType, content: bytes):
        size_ok, size_error = validate_file_size(len(content))
        if not size_ok:
            raise ValidationError(size_error)

        if not content_matches_type(content, file_type):
            raise ValidationError(
                f"File content does not match its declared type ({file_type.value}). "
                "Please select a valid PDF or Word document."
            )

        parser = self.parser_lookup(file_type.value)
        if parser is None:
            raise ValidationError(f"Unsupported file type: {file.type or file_type.value}")

        # pypdf and python-docx are synchronous and CPU-bound
        parsed = await asyncio.to_thread(parser.parse, content, file.name)
        if not parsed.success:
            raise ParseError(
                f"The file appears to be corrupted or invalid. Please try a different file. ({parsed.error})"
            )

        text = clean_extracted_text(parsed.text)
        if len(text) < settings.MIN_SYLLABUS_CHARS:
            raise ParseError(MSG_NO_MEANINGFUL_TEXT)

        return text, parsed.page_count

    async def _load_content(self, uri: str) -> bytes:
        parsed = urlparse(uri)

        if parsed.scheme in ("http", "https"):
            try:
                async with httpx.AsyncClient(
                    follow_redirects=True,
                    timeout=30.0,
                    transport=self._transport,
                ) as client:
                    response = await client.get(uri)
                    response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ValidationError(
                    f"Could not download file (HTTP {e.response.status_code})."
                ) from e
            except httpx.TransportError as e:
                raise TransportError(f"Network error while reading file: {e}") from e
            return response.content

        path = unquote(parsed.path) if parsed.scheme == "file" else uri

        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {path}") from e
        except PermissionError as e:
            raise ValidationError(
                "Permission denied. Please ensure the app has access to read files."
            ) from e
        except OSError as e:
            raise ValidationError(f"File reading failed: {e.strerror or e}") from e


async def read_file_text(file: FileInfo, content: Optional[bytes] = None) -> FileReadResult:
    """Read a file with the default extractor registry."""
    return await FileReaderService().read_file_text(file, content)
