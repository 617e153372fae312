"""
Object access logic.

Contains the access layer, key naming, bucket provisioning and the
domain models and errors they share.
"""

from .access import ObjectAccessLayer
from .errors import (
    AccessLayerError,
    DeleteFailedError,
    ListFailedError,
    ObjectNotFoundError,
    PresignFailedError,
    RetrieveFailedError,
    StoreFailedError,
)
from .models import (
    GrantOperation,
    ObjectListing,
    ObjectSummary,
    PresignedGrant,
    RetrievedObject,
    StoreResult,
)
from .naming import build_storage_key
from .provisioner import BucketProvisioner

__all__ = [
    "ObjectAccessLayer",
    "AccessLayerError",
    "DeleteFailedError",
    "ListFailedError",
    "ObjectNotFoundError",
    "PresignFailedError",
    "RetrieveFailedError",
    "StoreFailedError",
    "GrantOperation",
    "ObjectListing",
    "ObjectSummary",
    "PresignedGrant",
    "RetrievedObject",
    "StoreResult",
    "build_storage_key",
    "BucketProvisioner",
]
