"""
Errors raised by the access layer.

Not-found is kept distinct from every other store failure so the HTTP
layer can answer 404 for missing objects and 500 for everything else.
"""

from typing import Optional


class AccessLayerError(Exception):
    """Base class for access layer failures."""

    message = "Object storage operation failed"

    def __init__(self, key: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.key = key
        self.detail = detail
        super().__init__(detail or self.message)


class ObjectNotFoundError(AccessLayerError):
    message = "File not found"


class StoreFailedError(AccessLayerError):
    message = "Failed to upload file"


class RetrieveFailedError(AccessLayerError):
    message = "Failed to retrieve file"


class ListFailedError(AccessLayerError):
    message = "Failed to list files"


class DeleteFailedError(AccessLayerError):
    message = "Failed to delete file"


class PresignFailedError(AccessLayerError):
    message = "Failed to generate presigned URL"
