"""
File Utilities

Upload checks for syllabus files: declared type, size, magic bytes and
a safe display name.
"""

import os
import re
import logging
from typing import Optional, Tuple

import filetype

from studyplan.core.config import settings
from studyplan.schemas.document import (
    FileType,
    get_file_type_from_mime,
    get_file_type_from_name,
)

logger = logging.getLogger(__name__)

# .docx is a zip container; filetype may report either of these
_DOCX_SNIFFED_MIMES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/zip",
}
_DOC_SNIFFED_MIMES = {
    "application/msword",
    "application/x-ole-storage",
    "application/CDFV2",
}


# ============================================================
# MIME TYPE DETECTION
# ============================================================

def detect_mime_type(file_content: bytes) -> Optional[str]:
    """MIME type guessed from magic bytes, or None when unrecognised."""
    kind = filetype.guess(file_content)
    if kind is None:
        return None
    logger.debug(f"Detected MIME type: {kind.mime}")
    return kind.mime


def content_matches_type(file_content: bytes, file_type: FileType) -> bool:
    """
    Check that sniffed content does not contradict the declared type.

    Unrecognised content is given the benefit of the doubt; the decoder
    will report it if it cannot be read.
    """
    sniffed = detect_mime_type(file_content)
    if sniffed is None:
        return True

    if file_type == FileType.PDF:
        return sniffed == "application/pdf"
    if file_type == FileType.DOCX:
        return sniffed in _DOCX_SNIFFED_MIMES
    if file_type == FileType.DOC:
        return sniffed in _DOC_SNIFFED_MIMES
    return False


# ============================================================
# FILENAME HANDLING
# ============================================================

def sanitize_filename(filename: str) -> str:
    """Basename only, word characters plus `-` and `.`, at most 200 chars."""
    filename = os.path.basename(filename or "")
    filename = filename.replace("\x00", "")

    # \w is Unicode-aware; hyphen and dot are also allowed
    filename = re.sub(r'[^\w\-.]', '_', filename)
    filename = re.sub(r'_+', '_', filename)
    filename = filename.strip('_.')

    if len(filename) > 200:
        name, ext = os.path.splitext(filename)
        filename = name[:200 - len(ext)] + ext

    if not filename:
        filename = "unnamed_file"

    return filename


# ============================================================
# FILE VALIDATION
# ============================================================

def validate_file_size(file_size: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a declared file size against the configured maximum.

    Example:
        # If MAX_FILE_SIZE_MB = 50
        validate_file_size(1024)          # (True, None)
        validate_file_size(100_000_000)   # (False, "...")
    """
    if file_size > settings.MAX_FILE_SIZE_BYTES:
        return False, (
            f"File size exceeds {settings.MAX_FILE_SIZE_MB}MB limit. "
            "Please use a smaller file."
        )
    return True, None


def resolve_file_type(mime_type: Optional[str], filename: Optional[str]) -> Optional[FileType]:
    """Declared MIME type wins; the file name extension is the fallback."""
    return get_file_type_from_mime(mime_type) or get_file_type_from_name(filename)


def validate_file_type(
    mime_type: Optional[str],
    filename: Optional[str]
) -> Tuple[Optional[FileType], Optional[str]]:
    """
    Check the declared MIME type / extension against the allow-list.

    Returns:
        Tuple of (file_type, error_message)
    """
    file_type = resolve_file_type(mime_type, filename)
    if file_type is None:
        return None, "Unsupported file type. Please select a PDF or Word document."
    return file_type, None


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Example:
        format_file_size(1536)      # "1.50 KB"
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.2f} PB"
