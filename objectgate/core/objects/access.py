"""
Object access layer.

Mediates between HTTP handlers and the object store. Owns three things:
- Naming: every stored file gets a timestamp-prefixed key
- Metadata: the original filename rides along as user metadata so a
  later download or listing can recover it
- Failure shape: a missing object is ObjectNotFoundError; any other store
  failure collapses to one error type per operation

Two transfer strategies are offered side by side:
- Proxied: bytes flow through this service (store / retrieve)
- Direct: the caller gets a pre-signed URL and talks to the store itself
  (upload_url / download_url)

Nothing here retries. A single failed store call fails the operation.
"""

import logging
from typing import Callable, Optional
from urllib.parse import quote, unquote

from ...infrastructure.storage.client import (
    ObjectMissingError,
    ObjectStoreClient,
    StorageError,
)
from .errors import (
    DeleteFailedError,
    ListFailedError,
    ObjectNotFoundError,
    PresignFailedError,
    RetrieveFailedError,
    StoreFailedError,
)
from .models import (
    DEFAULT_CONTENT_TYPE,
    ORIGINAL_NAME_METADATA_KEY,
    GrantOperation,
    ObjectListing,
    ObjectSummary,
    PresignedGrant,
    RetrievedObject,
    StoreResult,
)
from .naming import build_storage_key

logger = logging.getLogger(__name__)


def encode_original_name(filename: str) -> str:
    # S3 user metadata must be ASCII
    return quote(filename, safe=" ")


def decode_original_name(value: Optional[str]) -> Optional[str]:
    return unquote(value) if value else None


class ObjectAccessLayer:
    """
    Store, retrieve, list and delete objects in one bucket, and issue
    pre-signed URLs for direct transfer.

    Stateless apart from its collaborators, so one instance is shared by
    all requests.
    """

    def __init__(
        self,
        client: ObjectStoreClient,
        bucket: str,
        url_expiry_seconds: int,
        key_builder: Callable[[str], str] = build_storage_key,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._url_expiry_seconds = url_expiry_seconds
        self._key_builder = key_builder

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def url_expiry_seconds(self) -> int:
        return self._url_expiry_seconds

    async def store(self, data: bytes, filename: str, content_type: Optional[str]) -> StoreResult:
        """Write an uploaded file under a freshly derived key."""
        key = self._key_builder(filename)
        content_type = content_type or DEFAULT_CONTENT_TYPE

        try:
            await self._client.put_object(
                self._bucket,
                key,
                data,
                content_type=content_type,
                metadata={ORIGINAL_NAME_METADATA_KEY: encode_original_name(filename)},
            )
        except StorageError as e:
            logger.error(
                "Failed to store object",
                extra={"bucket": self._bucket, "key": key, "error": str(e)},
            )
            raise StoreFailedError(key, str(e)) from e

        logger.info(
            "Stored object",
            extra={"bucket": self._bucket, "key": key, "size_bytes": len(data)},
        )

        return StoreResult(key=key, original_name=filename, content_type=content_type)

    async def retrieve(self, key: str) -> RetrievedObject:
        """Open an object for streaming along with its response headers."""
        # No object can be stored under an empty key; S3 rejects it as invalid
        if not key:
            raise ObjectNotFoundError(key)

        try:
            stat = await self._client.stat_object(self._bucket, key)
            stream = await self._client.get_object(self._bucket, key)
        except ObjectMissingError as e:
            raise ObjectNotFoundError(key) from e
        except StorageError as e:
            logger.error(
                "Failed to retrieve object",
                extra={"bucket": self._bucket, "key": key, "error": str(e)},
            )
            raise RetrieveFailedError(key, str(e)) from e

        return RetrievedObject(
            key=key,
            content_type=stat.content_type or DEFAULT_CONTENT_TYPE,
            content_length=stat.size,
            stream=stream,
            original_name=decode_original_name(stat.metadata.get(ORIGINAL_NAME_METADATA_KEY)),
        )

    async def list_objects(self) -> ObjectListing:
        """
        List every object in the bucket with its recorded metadata.

        Each object is stat'ed to recover its original name and content
        type. A failed stat degrades that one entry to key, size and
        last-modified; it never fails the listing.
        """
        try:
            objects = await self._client.list_objects(self._bucket)
        except StorageError as e:
            logger.error(
                "Failed to list objects",
                extra={"bucket": self._bucket, "error": str(e)},
            )
            raise ListFailedError(detail=str(e)) from e

        listing = ObjectListing(bucket=self._bucket)
        for obj in objects:
            try:
                stat = await self._client.stat_object(self._bucket, obj.key)
            except StorageError as e:
                logger.warning(
                    "Stat failed during listing, returning basic info",
                    extra={"bucket": self._bucket, "key": obj.key, "error": str(e)},
                )
                listing.files.append(ObjectSummary(
                    name=obj.key,
                    size=obj.size,
                    last_modified=obj.last_modified,
                ))
                continue

            original_name = decode_original_name(stat.metadata.get(ORIGINAL_NAME_METADATA_KEY))
            listing.files.append(ObjectSummary(
                name=obj.key,
                size=obj.size,
                last_modified=obj.last_modified,
                original_name=original_name or obj.key,
                content_type=stat.content_type,
            ))

        return listing

    async def delete(self, key: str) -> None:
        """
        Delete an object.

        The object is stat'ed first: S3 reports success when deleting a
        missing key, and callers need to tell "deleted" from "never there".
        """
        if not key:
            raise ObjectNotFoundError(key)

        try:
            await self._client.stat_object(self._bucket, key)
        except ObjectMissingError as e:
            raise ObjectNotFoundError(key) from e
        except StorageError as e:
            logger.error(
                "Failed to stat object before delete",
                extra={"bucket": self._bucket, "key": key, "error": str(e)},
            )
            raise DeleteFailedError(key, str(e)) from e

        try:
            await self._client.remove_object(self._bucket, key)
        except ObjectMissingError as e:
            raise ObjectNotFoundError(key) from e
        except StorageError as e:
            logger.error(
                "Failed to delete object",
                extra={"bucket": self._bucket, "key": key, "error": str(e)},
            )
            raise DeleteFailedError(key, str(e)) from e

        logger.info("Deleted object", extra={"bucket": self._bucket, "key": key})

    async def upload_url(self, key: str) -> PresignedGrant:
        """Pre-signed PUT URL. The key usually names an object that does not exist yet."""
        return await self._presign(GrantOperation.PUT, key)

    async def download_url(self, key: str) -> PresignedGrant:
        """Pre-signed GET URL. Existence of the key is not checked."""
        return await self._presign(GrantOperation.GET, key)

    async def _presign(self, operation: GrantOperation, key: str) -> PresignedGrant:
        if operation is GrantOperation.PUT:
            sign = self._client.presigned_put_url
        else:
            sign = self._client.presigned_get_url

        try:
            url = await sign(self._bucket, key, self._url_expiry_seconds)
        except StorageError as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={
                    "bucket": self._bucket,
                    "key": key,
                    "operation": operation.value,
                    "error": str(e),
                },
            )
            raise PresignFailedError(key, str(e)) from e

        return PresignedGrant(
            url=url,
            key=key,
            operation=operation,
            expires_in=self._url_expiry_seconds,
        )
