"""
Object store client for an S3-compatible bucket.

Supports MinIO, AWS S3 and other S3-compatible services through boto3.
The client is a thin capability layer: bucket existence/creation, object
put/get/stat/list/delete and pre-signed URL generation. Naming, metadata
policy and error translation for callers live in the core layer.

boto3 is synchronous, so every call is pushed to a worker thread with
asyncio.to_thread. The event loop never blocks on store I/O.

Mock mode keeps objects in memory, enabling API testing without
provisioning a real object store.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Optional, Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)

# Chunk size used when streaming object bodies back to callers
STREAM_CHUNK_SIZE = 64 * 1024

# Error codes the S3 API uses for a missing key or bucket
NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NotFound", "404"})


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


class ObjectMissingError(StorageError):
    """Raised when the requested object (or its bucket) does not exist."""
    pass


@dataclass
class StorageConfig:
    """Configuration for an S3-compatible store."""
    endpoint_url: str
    access_key_id: str
    secret_access_key: str
    region: str = "us-east-1"


@dataclass
class ObjectStat:
    """
    Object metadata as returned by a HEAD request.

    `metadata` holds user metadata with the `x-amz-meta-` prefix stripped
    and keys lowercased, exactly as boto3 reports it.
    """
    key: str
    size: int
    content_type: Optional[str] = None
    last_modified: Optional[datetime] = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class ObjectInfo:
    """One entry of a bucket listing."""
    key: str
    size: int
    last_modified: Optional[datetime] = None


class ObjectStoreClient(Protocol):
    """
    Protocol for object store operations.

    Using a protocol means tests can provide fakes and we can swap
    storage backends without changing dependent code.
    """

    async def bucket_exists(self, bucket: str) -> bool:
        """Return whether the bucket exists."""
        ...

    async def make_bucket(self, bucket: str, region: str) -> None:
        """Create the bucket in the given region."""
        ...

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        """Write an object with its content type and user metadata."""
        ...

    async def get_object(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        """Open the object body and return an async iterator over its chunks."""
        ...

    async def stat_object(self, bucket: str, key: str) -> ObjectStat:
        """Fetch size, content type and metadata without the body."""
        ...

    async def list_objects(self, bucket: str) -> list[ObjectInfo]:
        """List every object in the bucket."""
        ...

    async def remove_object(self, bucket: str, key: str) -> None:
        """Delete an object. Deleting a missing key is not an error."""
        ...

    async def presigned_put_url(self, bucket: str, key: str, expiry_seconds: int) -> str:
        """Generate a temporary upload URL."""
        ...

    async def presigned_get_url(self, bucket: str, key: str, expiry_seconds: int) -> str:
        """Generate a temporary download URL."""
        ...


def _error_code(error: Exception) -> str:
    response = getattr(error, "response", None) or {}
    return str(response.get("Error", {}).get("Code", ""))


class S3ObjectStoreClient:
    """
    S3-compatible object store client.

    Uses boto3 with path-style addressing and v4 signatures, which is what
    MinIO and most self-hosted S3 implementations expect.

    Automatic retries are disabled: a single failed call fails the request.
    """

    def __init__(self, config: StorageConfig) -> None:
        import boto3
        from botocore.config import Config

        self._config = config

        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
            retries={"total_max_attempts": 1, "mode": "standard"},
        )

        self._s3_client = boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 object store client",
            extra={"endpoint": config.endpoint_url, "region": config.region},
        )

    async def _call(self, operation: str, func, /, **kwargs):
        """Run a boto3 call in a worker thread and normalize its errors."""
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            return await asyncio.to_thread(func, **kwargs)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                raise ObjectMissingError(f"{operation}: {_error_code(e)}") from e
            raise StorageError(f"{operation} failed: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"{operation} failed: {e}") from e

    async def bucket_exists(self, bucket: str) -> bool:
        """
        Check the bucket with HEAD.

        A 404 means the bucket is missing. Any other failure (403, network)
        raises, so a misconfigured store is not mistaken for an empty one.
        """
        try:
            await self._call("head_bucket", self._s3_client.head_bucket, Bucket=bucket)
        except ObjectMissingError:
            return False
        return True

    async def make_bucket(self, bucket: str, region: str) -> None:
        """Create the bucket, sending a location constraint outside us-east-1."""
        kwargs = {"Bucket": bucket}
        # us-east-1 is the default location and must not be sent explicitly
        if region and region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}
        await self._call("create_bucket", self._s3_client.create_bucket, **kwargs)

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        """
        Upload an object in a single PUT.

        User metadata is sent as x-amz-meta-* headers, so values must be
        ASCII. The caller is responsible for encoding them.
        """
        await self._call(
            "put_object",
            self._s3_client.put_object,
            Bucket=bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            Metadata=metadata or {},
        )

    async def get_object(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        """
        Open an object for streaming.

        The body is read in chunks off the event loop and closed once the
        iterator is exhausted or abandoned.
        """
        response = await self._call(
            "get_object", self._s3_client.get_object, Bucket=bucket, Key=key
        )
        return self._iter_body(response["Body"])

    async def _iter_body(self, body) -> AsyncIterator[bytes]:
        """Yield the body in fixed-size chunks, then close it."""
        try:
            while True:
                chunk = await asyncio.to_thread(body.read, STREAM_CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            body.close()

    async def stat_object(self, bucket: str, key: str) -> ObjectStat:
        """Read object headers with HEAD. User metadata keys come back lowercased."""
        response = await self._call(
            "head_object", self._s3_client.head_object, Bucket=bucket, Key=key
        )
        return ObjectStat(
            key=key,
            size=response.get("ContentLength", 0),
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
            metadata=response.get("Metadata") or {},
        )

    async def list_objects(self, bucket: str) -> list[ObjectInfo]:
        """
        List every object in the bucket.

        Follows list_objects_v2 continuation tokens, so buckets with more
        than 1000 objects are returned in full.
        """

        def _list_all() -> list[ObjectInfo]:
            objects = []
            paginator = self._s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket):
                for obj in page.get("Contents", []):
                    objects.append(ObjectInfo(
                        key=obj["Key"],
                        size=obj.get("Size", 0),
                        last_modified=obj.get("LastModified"),
                    ))
            return objects

        return await self._call("list_objects_v2", _list_all)

    async def remove_object(self, bucket: str, key: str) -> None:
        """Delete an object. S3 reports success for keys that do not exist."""
        await self._call(
            "delete_object", self._s3_client.delete_object, Bucket=bucket, Key=key
        )

    async def presigned_put_url(self, bucket: str, key: str, expiry_seconds: int) -> str:
        """
        Generate a pre-signed PUT URL.

        Signing happens locally; the store is not contacted and the key
        does not need to exist yet.
        """
        return await self._presign("put_object", bucket, key, expiry_seconds)

    async def presigned_get_url(self, bucket: str, key: str, expiry_seconds: int) -> str:
        """Generate a pre-signed GET URL. Existence is not checked."""
        return await self._presign("get_object", bucket, key, expiry_seconds)

    async def _presign(self, method: str, bucket: str, key: str, expiry_seconds: int) -> str:
        """Sign a request for the given client method."""
        return await self._call(
            "generate_presigned_url",
            self._s3_client.generate_presigned_url,
            ClientMethod=method,
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=expiry_seconds,
        )


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

@dataclass
class _MockObject:
    data: bytes
    content_type: str
    metadata: dict[str, str]
    last_modified: datetime


class MockObjectStoreClient:
    """
    In-memory object store for local development and tests.

    Buckets are dictionaries of {key: object}. Pre-signed "URLs" are mock
    URIs carrying the operation and expiry so callers can inspect them.

    Not suitable for production, but perfect for development and testing.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, _MockObject]] = {}
        logger.info("Initialized mock object store client (in-memory)")

    def _bucket(self, bucket: str) -> dict[str, _MockObject]:
        if bucket not in self._buckets:
            raise ObjectMissingError(f"Bucket not found: {bucket}")
        return self._buckets[bucket]

    def _object(self, bucket: str, key: str) -> _MockObject:
        objects = self._bucket(bucket)
        if key not in objects:
            raise ObjectMissingError(f"Object not found: {key}")
        return objects[key]

    async def bucket_exists(self, bucket: str) -> bool:
        """Check bucket in memory."""
        return bucket in self._buckets

    async def make_bucket(self, bucket: str, region: str) -> None:
        """Create an empty bucket in memory. The region is ignored."""
        self._buckets.setdefault(bucket, {})

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> None:
        """Store object in memory."""
        # boto3 reports user metadata keys lowercased
        self._bucket(bucket)[key] = _MockObject(
            data=bytes(data),
            content_type=content_type,
            metadata={k.lower(): v for k, v in (metadata or {}).items()},
            last_modified=datetime.now(timezone.utc),
        )

        logger.debug(
            "Stored object in mock storage",
            extra={"bucket": bucket, "key": key, "size_bytes": len(data)},
        )

    async def get_object(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        """Stream object from memory in the same chunk size as the S3 client."""
        data = self._object(bucket, key).data

        async def _chunks() -> AsyncIterator[bytes]:
            for start in range(0, len(data), STREAM_CHUNK_SIZE):
                yield data[start:start + STREAM_CHUNK_SIZE]

        return _chunks()

    async def stat_object(self, bucket: str, key: str) -> ObjectStat:
        """Return object attributes from memory."""
        obj = self._object(bucket, key)
        return ObjectStat(
            key=key,
            size=len(obj.data),
            content_type=obj.content_type,
            last_modified=obj.last_modified,
            metadata=dict(obj.metadata),
        )

    async def list_objects(self, bucket: str) -> list[ObjectInfo]:
        """List objects in insertion order."""
        return [
            ObjectInfo(key=key, size=len(obj.data), last_modified=obj.last_modified)
            for key, obj in self._bucket(bucket).items()
        ]

    async def remove_object(self, bucket: str, key: str) -> None:
        """Delete object from memory."""
        # S3 deletes are silent for missing keys
        self._bucket(bucket).pop(key, None)

    async def presigned_put_url(self, bucket: str, key: str, expiry_seconds: int) -> str:
        """
        Generate mock upload URL.

        In development, clients cannot PUT to this URL. Use POST /upload
        against the service instead.
        """
        return f"mock://storage/{bucket}/{quote(key)}?op=put&expires={expiry_seconds}"

    async def presigned_get_url(self, bucket: str, key: str, expiry_seconds: int) -> str:
        """Generate mock download URL."""
        return f"mock://storage/{bucket}/{quote(key)}?op=get&expires={expiry_seconds}"


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStoreClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory client

    Returns:
        ObjectStoreClient implementation (S3 or Mock)
    """
    if mock_mode:
        return MockObjectStoreClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3ObjectStoreClient(config)
