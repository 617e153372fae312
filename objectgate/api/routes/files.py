"""
File API endpoints (server-proxied transfer).

Bytes flow through this service in both directions:
1. Client uploads a file (POST /upload) → stored under a new key
2. Client downloads it by key (GET /file/{key}) → streamed from the store
3. Client lists (GET /files) or deletes (DELETE /file/{key})

For large files, prefer the pre-signed URL endpoints so the transfer goes
straight to the object store.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import StreamingResponse
from pydantic import Field
from starlette.datastructures import UploadFile

from ...core.objects.errors import AccessLayerError
from ..dependencies import AccessLayerDep, SettingsDep
from ..errors import raise_for_access_error
from ..schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class UploadResponse(CamelModel):
    """Response after storing an uploaded file."""
    success: bool = True
    message: str = "File uploaded successfully"
    filename: str = Field(description="Storage key assigned to the file")
    original_name: str = Field(description="Filename as sent by the client")
    mimetype: str = Field(description="Content type recorded with the object")


class FileSummary(CamelModel):
    """One object in the bucket listing."""
    name: str = Field(description="Storage key")
    original_name: Optional[str] = Field(default=None, description="Filename at upload time")
    size: int = Field(description="Object size in bytes")
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None


class FileListResponse(CamelModel):
    """Every object in the bucket."""
    bucket: str
    files: list[FileSummary]
    count: int


class DeleteResponse(CamelModel):
    success: bool = True
    message: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Upload a file",
    description="Upload one file as multipart/form-data. The response carries its storage key.",
)
async def upload_file(
    request: Request,
    access: AccessLayerDep,
    settings: SettingsDep,
) -> UploadResponse:
    """
    Store a single uploaded file.

    The form is parsed by hand so the file and field limits apply before
    any bytes reach the store. Starlette answers 400 when a limit is
    exceeded.
    """
    form = await request.form(
        max_files=settings.max_upload_files,
        max_fields=settings.max_upload_fields,
    )

    try:
        upload = next(
            (value for value in form.values() if isinstance(value, UploadFile)),
            None,
        )
        if upload is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No file uploaded",
            )

        # Read one byte past the limit to detect oversize files
        data = await upload.read(settings.max_upload_size_bytes + 1)
        if len(data) > settings.max_upload_size_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File exceeds {settings.max_upload_size_mb}MB",
            )

        original_name = upload.filename or ""
        logger.info(
            "Processing file upload",
            extra={
                "original_name": original_name,
                "content_type": upload.content_type,
                "size_bytes": len(data),
            }
        )

        try:
            result = await access.store(data, original_name, upload.content_type)
        except AccessLayerError as e:
            raise_for_access_error(e)
    finally:
        await form.close()

    return UploadResponse(
        filename=result.key,
        original_name=result.original_name,
        mimetype=result.content_type,
    )


@router.get(
    "/file/{filename:path}",
    summary="Download a file",
    description="Stream an object's bytes with its content type and original filename.",
    responses={404: {"description": "File not found"}},
)
async def get_file(filename: str, access: AccessLayerDep) -> StreamingResponse:
    try:
        obj = await access.retrieve(filename)
    except AccessLayerError as e:
        raise_for_access_error(e)

    # Content-Type goes in the headers verbatim; media_type would append a charset
    return StreamingResponse(obj.stream, headers=obj.headers)


@router.get(
    "/files",
    response_model=FileListResponse,
    response_model_exclude_none=True,
    summary="List files",
    description="List every object in the bucket with its recorded metadata.",
)
async def list_files(access: AccessLayerDep) -> FileListResponse:
    try:
        listing = await access.list_objects()
    except AccessLayerError as e:
        raise_for_access_error(e)

    return FileListResponse(
        bucket=listing.bucket,
        files=[
            FileSummary(
                name=item.name,
                original_name=item.original_name,
                size=item.size,
                last_modified=item.last_modified,
                content_type=item.content_type,
            )
            for item in listing.files
        ],
        count=listing.count,
    )


@router.delete(
    "/file/{filename:path}",
    response_model=DeleteResponse,
    summary="Delete a file",
    responses={404: {"description": "File not found"}},
)
async def delete_file(filename: str, access: AccessLayerDep) -> DeleteResponse:
    try:
        await access.delete(filename)
    except AccessLayerError as e:
        raise_for_access_error(e)

    return DeleteResponse(message=f"File '{filename}' deleted successfully")
