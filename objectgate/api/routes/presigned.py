"""
Pre-signed URL endpoints (client-direct transfer).

Instead of streaming bytes through this service, the client asks for a
time-limited URL and transfers directly with the object store:
1. GET /upload-url/{filename} → PUT the file to the returned URL
2. POST /posts with the returned fileKey to record it
3. GET /download-url/{fileKey} → GET the file from the returned URL

Grants are not validated against the bucket: upload URLs are for objects
that do not exist yet, and expiry is enforced by the store alone.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...core.objects.errors import AccessLayerError
from ..dependencies import AccessLayerDep
from ..errors import raise_for_access_error
from ..schemas import CamelModel

router = APIRouter()


class UploadUrlResponse(CamelModel):
    """Pre-signed PUT URL for a direct upload."""
    upload_url: str = Field(description="URL the client PUTs the file to")
    file_key: str = Field(description="Storage key the URL is bound to")
    expires_in: int = Field(description="Seconds until the URL stops working")


class DownloadUrlResponse(BaseModel):
    """Pre-signed GET URL for a direct download."""
    url: str


@router.get(
    "/upload-url/{filename:path}",
    response_model=UploadUrlResponse,
    summary="Get a pre-signed upload URL",
)
async def get_upload_url(filename: str, access: AccessLayerDep) -> UploadUrlResponse:
    try:
        grant = await access.upload_url(filename)
    except AccessLayerError as e:
        raise_for_access_error(e)

    return UploadUrlResponse(
        upload_url=grant.url,
        file_key=grant.key,
        expires_in=grant.expires_in,
    )


@router.get(
    "/download-url/{file_key:path}",
    response_model=DownloadUrlResponse,
    summary="Get a pre-signed download URL",
)
async def get_download_url(file_key: str, access: AccessLayerDep) -> DownloadUrlResponse:
    try:
        grant = await access.download_url(file_key)
    except AccessLayerError as e:
        raise_for_access_error(e)

    return DownloadUrlResponse(url=grant.url)
