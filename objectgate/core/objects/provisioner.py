"""
Bucket provisioning.

Runs once at application startup. The service cannot operate without its
bucket, so any failure here propagates and aborts startup.
"""

import logging

from ...infrastructure.storage.client import ObjectStoreClient

logger = logging.getLogger(__name__)


class BucketProvisioner:
    """Ensures the target bucket exists. Safe to run on every start."""

    def __init__(self, client: ObjectStoreClient, region: str = "us-east-1") -> None:
        self._client = client
        self._region = region

    async def ensure(self, bucket: str) -> bool:
        """
        Create the bucket if it is missing.

        Returns True when the bucket was created, False when it already
        existed. Store errors are not caught.
        """
        if await self._client.bucket_exists(bucket):
            logger.info("Bucket already exists", extra={"bucket": bucket})
            return False

        await self._client.make_bucket(bucket, self._region)
        logger.info(
            "Bucket created",
            extra={"bucket": bucket, "region": self._region},
        )
        return True
