"""
Object storage integration.

Supports MinIO and AWS S3 via the S3-compatible API.
Includes mock mode for local development without a running store.
"""

from .client import (
    MockObjectStoreClient,
    ObjectInfo,
    ObjectMissingError,
    ObjectStat,
    ObjectStoreClient,
    S3ObjectStoreClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)

__all__ = [
    "MockObjectStoreClient",
    "ObjectInfo",
    "ObjectMissingError",
    "ObjectStat",
    "ObjectStoreClient",
    "S3ObjectStoreClient",
    "StorageConfig",
    "StorageError",
    "create_storage_client",
]
