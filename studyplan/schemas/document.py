"""
Document Schemas

File handles and text-extraction results for syllabus documents.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class FileType(str, Enum):
    """Syllabus formats accepted for upload."""
    PDF = "pdf"
    DOCX = "docx"
    DOC = "doc"


MIME_TYPE_MAP = {
    "application/pdf": FileType.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": FileType.DOCX,
    "application/msword": FileType.DOC,
}


def get_file_type_from_mime(mime_type: Optional[str]) -> Optional[FileType]:
    """Map a declared MIME type to a FileType (substring match, parameters ignored)."""
    if not mime_type:
        return None
    lowered = mime_type.lower()
    for mime, file_type in MIME_TYPE_MAP.items():
        if mime in lowered:
            return file_type
    return None


def get_file_type_from_name(filename: Optional[str]) -> Optional[FileType]:
    """Map a file name's extension to a FileType."""
    if not filename or "." not in filename:
        return None
    ext = filename.rsplit(".", 1)[1].lower()
    try:
        return FileType(ext)
    except ValueError:
        return None


class FileInfo(BaseModel):
    """File handle as returned by the platform document picker."""
    uri: str = Field(..., description="file://, plain path or http(s) URL")
    name: str
    type: str = Field(default="", description="Declared MIME type")
    size: int = Field(..., ge=0, description="Declared size in bytes")


class FileReadMetadata(BaseModel):
    file_name: str
    file_size: int
    file_type: str
    processing_time: int = Field(description="Milliseconds spent reading")
    text_length: int
    page_count: int = 0


class FileReadResponse(BaseModel):
    text: str
    metadata: FileReadMetadata
