"""
File Upload Utility - Validate offer letter template uploads.

Supported formats:
- Word (.docx)
- PDF (.pdf)
- Plain Text (.txt)
- HTML (.html)

Max file size: 5MB
"""

from datetime import datetime
from typing import Optional, Tuple

from fastapi import HTTPException, UploadFile

MAX_FILE_SIZE_MB = 5
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
ALLOWED_EXTENSIONS = {'.docx', '.pdf', '.txt', '.html'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def template_storage_path(user_id: int, filename: str, now: Optional[datetime] = None) -> str:
    """``{user_id}/{timestamp}_{filename}``, timestamp in milliseconds."""
    now = now or datetime.utcnow()
    safe_name = filename.replace('/', '_').replace('\\', '_')
    return f"{user_id}/{int(now.timestamp() * 1000)}_{safe_name}"


async def read_template_file(file: UploadFile) -> Tuple[bytes, str]:
    """
    Read and validate an uploaded template.

    Args:
        file: FastAPI UploadFile

    Returns:
        Tuple of (content, filename)

    Raises:
        HTTPException on validation errors
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{ext}'. Allowed: DOCX, PDF, TXT, HTML"
        )

    content = await file.read()

    if len(content) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_FILE_SIZE_MB}MB"
        )
    if not content:
        raise HTTPException(status_code=400, detail="File is empty")

    return content, file.filename
