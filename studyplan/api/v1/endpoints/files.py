"""
File Endpoints

HTTP API for reading syllabus documents into text.

Endpoints:
----------
- POST  /files/read  - Upload a PDF/DOCX and get its cleaned text
"""

from fastapi import APIRouter, Depends, File, UploadFile

from studyplan.api.deps import get_current_user, get_file_reader, raise_http_error
from studyplan.models.user import User
from studyplan.schemas.document import FileInfo, FileReadResponse
from studyplan.services.file_reader_service import FileReaderService, FileReadResult
from studyplan.utils.file_utils import sanitize_filename

router = APIRouter(tags=["Files"])


async def read_upload(upload: UploadFile, reader: FileReaderService) -> FileReadResult:
    """Run an uploaded file through the file reader."""
    content = await upload.read()
    filename = sanitize_filename(upload.filename or "")
    file_info = FileInfo(
        uri=f"upload://{filename}",
        name=filename,
        type=upload.content_type or "",
        size=len(content),
    )
    return await reader.read_file_text(file_info, content)


@router.post(
    "/files/read",
    response_model=FileReadResponse,
    summary="Extract text from a syllabus file",
    responses={
        400: {"description": "File too large, unsupported or mislabelled"},
        401: {"description": "Not authenticated"},
        422: {"description": "No meaningful text could be extracted"},
    },
)
async def read_file(
    file: UploadFile = File(..., description="PDF or DOCX syllabus"),
    current_user: User = Depends(get_current_user),
    reader: FileReaderService = Depends(get_file_reader),
):
    result = await read_upload(file, reader)
    if not result.success:
        raise_http_error(result.error)
    return FileReadResponse(text=result.text, metadata=result.metadata)
