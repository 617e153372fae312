"""
Domain models for stored objects.

These are plain dataclasses with no dependency on FastAPI or boto3. The
HTTP layer maps them onto response schemas.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import AsyncIterator, Optional
from urllib.parse import quote

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# User metadata key carrying the client-supplied filename.
# S3 exposes it as the x-amz-meta-original-name header.
ORIGINAL_NAME_METADATA_KEY = "original-name"


class GrantOperation(Enum):
    """Store operation a pre-signed URL is bound to."""
    PUT = "put"
    GET = "get"


@dataclass(frozen=True)
class StoreResult:
    """Outcome of storing an uploaded file."""
    key: str
    original_name: str
    content_type: str


@dataclass(frozen=True)
class ObjectSummary:
    """
    One entry in a bucket listing.

    original_name and content_type are None when the per-object stat
    failed and the entry was degraded to what the listing itself reports.
    """
    name: str
    size: int
    last_modified: Optional[datetime] = None
    original_name: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.content_type is None and self.original_name is None


@dataclass
class ObjectListing:
    """All objects in the bucket, in the order the store returned them."""
    bucket: str
    files: list[ObjectSummary] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.files)


@dataclass
class RetrievedObject:
    """An open object body plus the headers needed to serve it."""
    key: str
    content_type: str
    content_length: int
    stream: AsyncIterator[bytes]
    original_name: Optional[str] = None

    @property
    def content_disposition(self) -> Optional[str]:
        if not self.original_name:
            return None
        return content_disposition(self.original_name)

    @property
    def headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": self.content_type,
            "Content-Length": str(self.content_length),
        }
        if self.content_disposition:
            headers["Content-Disposition"] = self.content_disposition
        return headers


@dataclass(frozen=True)
class PresignedGrant:
    """A pre-signed URL handed to the caller. Never stored."""
    url: str
    key: str
    operation: GrantOperation
    expires_in: int


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header for a filename.

    HTTP headers are latin-1, so non-ASCII names get an ASCII fallback
    plus the RFC 5987 filename* parameter.
    """
    if filename.isascii():
        escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
        return f'attachment; filename="{escaped}"'

    fallback = "".join(c if c.isascii() and c not in '"\\' else "_" for c in filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
