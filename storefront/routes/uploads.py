"""Read multipart uploads into service-level files"""

from typing import Optional

from fastapi import UploadFile

from ..services.uploads import UploadedFile


async def read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    """None for a missing or empty file field"""
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    if not content:
        return None
    return UploadedFile(
        filename=upload.filename,
        content=content,
        content_type=upload.content_type or "application/octet-stream",
    )


async def read_uploads(uploads: Optional[list[UploadFile]]) -> list[UploadedFile]:
    files = [await read_upload(upload) for upload in uploads or []]
    return [f for f in files if f is not None]
