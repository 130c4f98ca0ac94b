"""
DOCX decoding with python-docx.

Body paragraphs come first in document order, then each table as
`cell | cell` rows (week-by-week schedules are usually tables).
Headers, footers and images are skipped.
"""

import io
import logging
from typing import List, Optional

from docx import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError

from studyplan.ai.parsers.base import PageContent, ParsedDocument, ParserType, TextExtractor

logger = logging.getLogger(__name__)


def _table_lines(table) -> List[str]:
    lines = []
    for row in table.rows:
        cells = [cell.text.strip().replace("\n", " ") for cell in row.cells]
        if any(cells):
            lines.append(" | ".join(cells))
    return lines


class DOCXParser(TextExtractor):

    @property
    def supported_types(self) -> List[ParserType]:
        return [ParserType.DOCX]

    def parse(self, content: bytes, filename: Optional[str] = None) -> ParsedDocument:
        filename = filename or "unknown.docx"

        try:
            doc = DocxDocument(io.BytesIO(content))
        except PackageNotFoundError as e:
            logger.error(f"{filename} is not a DOCX package: {e}")
            return ParsedDocument.from_error(f"Invalid DOCX file (not a valid Office document): {e}")
        except Exception as e:
            logger.exception(f"python-docx failed to open {filename}")
            return ParsedDocument.from_error(f"Error parsing DOCX: {e}")

        blocks = [p.text.strip() for p in doc.paragraphs if p.text.strip()]
        for table in doc.tables:
            blocks.extend(_table_lines(table))
        text = self._clean_text("\n".join(blocks))

        logger.info(f"{filename}: {len(doc.paragraphs)} paragraphs, {len(doc.tables)} tables, {len(text)} chars")

        body = PageContent(
            page_number=1,
            text=text,
            metadata={"paragraph_count": len(doc.paragraphs), "table_count": len(doc.tables)},
        )
        return ParsedDocument(text=text, pages=[body], metadata=self._metadata(doc, filename))

    def _metadata(self, doc, filename: str) -> dict:
        props = doc.core_properties
        return {
            "filename": filename,
            "file_type": "docx",
            "title": props.title or self._fallback_title(filename),
            **({"author": props.author} if props.author else {}),
        }
