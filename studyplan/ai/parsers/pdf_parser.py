"""
PDF decoding with pypdf.

Only the text layer is read. Scanned syllabi have none and come back
empty with an explanatory error (no OCR); multi-column pages may
interleave.
"""

import io
import logging
from typing import List, Optional

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from studyplan.ai.parsers.base import PageContent, ParsedDocument, ParserType, TextExtractor

logger = logging.getLogger(__name__)

NO_TEXT_LAYER = "PDF appears to be scanned or image-based (no extractable text)"


class PDFParser(TextExtractor):
    """One PageContent per page, so page counts survive unreadable pages."""

    @property
    def supported_types(self) -> List[ParserType]:
        return [ParserType.PDF]

    def parse(self, content: bytes, filename: Optional[str] = None) -> ParsedDocument:
        filename = filename or "unknown.pdf"

        try:
            reader = PdfReader(io.BytesIO(content))
            pages = [self._read_page(page, number, filename) for number, page in enumerate(reader.pages, start=1)]
            metadata = self._metadata(reader, filename)
        except PdfReadError as e:
            logger.error(f"{filename} is not a readable PDF: {e}")
            return ParsedDocument.from_error(f"Invalid or corrupted PDF: {e}")
        except Exception as e:
            logger.exception(f"pypdf failed on {filename}")
            return ParsedDocument.from_error(f"Unexpected error parsing PDF: {e}")

        text = "\n\n".join(page.text for page in pages if page.text)
        if not text.strip():
            logger.warning(f"{filename}: {len(pages)} pages, no text layer")
            return ParsedDocument(text="", pages=pages, metadata=metadata, error=NO_TEXT_LAYER)

        logger.info(f"{filename}: {len(pages)} pages, {len(text)} chars")
        return ParsedDocument(text=text, pages=pages, metadata=metadata)

    def _read_page(self, page, number: int, filename: str) -> PageContent:
        try:
            return PageContent(page_number=number, text=self._clean_text(page.extract_text() or ""))
        except Exception as e:
            logger.warning(f"{filename}: page {number} unreadable: {e}")
            return PageContent(page_number=number, text="", metadata={"error": str(e)})

    def _metadata(self, reader: PdfReader, filename: str) -> dict:
        info = reader.metadata
        title = info.title if info else None
        author = info.author if info else None
        metadata = {
            "filename": filename,
            "file_type": "pdf",
            "page_count": len(reader.pages),
            "title": title or self._fallback_title(filename),
        }
        if author:
            metadata["author"] = author
        return metadata
