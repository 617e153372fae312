"""
Unit tests for the boto3-backed object store client.

Uses botocore's Stubber so no network or running store is needed. The
stubbed responses mirror what MinIO and S3 return.
"""

import io
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

import pytest
from botocore.awsrequest import AWSResponse
from botocore.response import StreamingBody
from botocore.stub import Stubber

from objectgate.infrastructure.storage.client import (
    MockObjectStoreClient,
    ObjectMissingError,
    S3ObjectStoreClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)

MODIFIED = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

INTERNAL_ERROR_BODY = (
    b"<?xml version=\"1.0\" encoding=\"UTF-8\"?>"
    b"<Error><Code>InternalError</Code><Message>We encountered an internal error.</Message></Error>"
)


class _RawBody:
    """Minimal urllib3-like body for a canned AWSResponse."""

    def __init__(self, body: bytes) -> None:
        self._body = body

    def stream(self, *args, **kwargs):
        yield self._body


@pytest.fixture
def client():
    return S3ObjectStoreClient(StorageConfig(
        endpoint_url="http://localhost:9000",
        access_key_id="minioadmin",
        secret_access_key="minioadmin",
    ))


@pytest.fixture
def stubber(client):
    with Stubber(client._s3_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


class TestBuckets:

    @pytest.mark.asyncio
    async def test_bucket_exists(self, client, stubber):
        stubber.add_response("head_bucket", {}, {"Bucket": "b"})
        assert await client.bucket_exists("b") is True

    @pytest.mark.asyncio
    async def test_missing_bucket_is_false(self, client, stubber):
        stubber.add_client_error("head_bucket", service_error_code="404", http_status_code=404)
        assert await client.bucket_exists("b") is False

    @pytest.mark.asyncio
    async def test_forbidden_bucket_raises(self, client, stubber):
        stubber.add_client_error("head_bucket", service_error_code="403", http_status_code=403)
        with pytest.raises(StorageError):
            await client.bucket_exists("b")

    @pytest.mark.asyncio
    async def test_make_bucket_default_region(self, client, stubber):
        stubber.add_response("create_bucket", {}, {"Bucket": "b"})
        await client.make_bucket("b", "us-east-1")

    @pytest.mark.asyncio
    async def test_make_bucket_other_region(self, client, stubber):
        stubber.add_response(
            "create_bucket",
            {},
            {"Bucket": "b", "CreateBucketConfiguration": {"LocationConstraint": "eu-west-1"}},
        )
        await client.make_bucket("b", "eu-west-1")


class TestObjects:

    @pytest.mark.asyncio
    async def test_put_object_sends_type_and_metadata(self, client, stubber):
        stubber.add_response(
            "put_object",
            {},
            {
                "Bucket": "b",
                "Key": "1-a.txt",
                "Body": b"hi",
                "ContentType": "text/plain",
                "Metadata": {"original-name": "a.txt"},
            },
        )
        await client.put_object("b", "1-a.txt", b"hi", "text/plain", {"original-name": "a.txt"})

    @pytest.mark.asyncio
    async def test_stat_object_maps_head_response(self, client, stubber):
        stubber.add_response(
            "head_object",
            {
                "ContentLength": 2,
                "ContentType": "text/plain",
                "LastModified": MODIFIED,
                "Metadata": {"original-name": "a.txt"},
            },
            {"Bucket": "b", "Key": "1-a.txt"},
        )

        stat = await client.stat_object("b", "1-a.txt")

        assert stat.size == 2
        assert stat.content_type == "text/plain"
        assert stat.last_modified == MODIFIED
        assert stat.metadata == {"original-name": "a.txt"}

    @pytest.mark.asyncio
    async def test_stat_missing_object(self, client, stubber):
        stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)
        with pytest.raises(ObjectMissingError):
            await client.stat_object("b", "nope")

    @pytest.mark.asyncio
    async def test_get_missing_object(self, client, stubber):
        stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
        with pytest.raises(ObjectMissingError):
            await client.get_object("b", "nope")

    @pytest.mark.asyncio
    async def test_get_object_streams_body(self, client, stubber):
        payload = b"x" * 200_000
        stubber.add_response(
            "get_object",
            {"Body": StreamingBody(io.BytesIO(payload), len(payload))},
            {"Bucket": "b", "Key": "k"},
        )

        stream = await client.get_object("b", "k")
        chunks = [chunk async for chunk in stream]

        assert b"".join(chunks) == payload
        assert len(chunks) > 1

    @pytest.mark.asyncio
    async def test_list_objects(self, client, stubber):
        stubber.add_response(
            "list_objects_v2",
            {
                "Contents": [
                    {"Key": "1-a.txt", "Size": 2, "LastModified": MODIFIED},
                    {"Key": "2-b.txt", "Size": 5, "LastModified": MODIFIED},
                ],
                "IsTruncated": False,
            },
            {"Bucket": "b"},
        )

        objects = await client.list_objects("b")

        assert [o.key for o in objects] == ["1-a.txt", "2-b.txt"]
        assert [o.size for o in objects] == [2, 5]

    @pytest.mark.asyncio
    async def test_list_empty_bucket(self, client, stubber):
        stubber.add_response("list_objects_v2", {"IsTruncated": False}, {"Bucket": "b"})
        assert await client.list_objects("b") == []

    @pytest.mark.asyncio
    async def test_upstream_error_is_generic(self, client, stubber):
        stubber.add_client_error(
            "delete_object", service_error_code="AccessDenied", http_status_code=403
        )
        with pytest.raises(StorageError) as excinfo:
            await client.remove_object("b", "k")
        assert not isinstance(excinfo.value, ObjectMissingError)


class TestPresignedUrls:

    @pytest.mark.asyncio
    async def test_put_url_is_path_style_and_carries_expiry(self, client):
        url = await client.presigned_put_url("b", "photo.png", 300)

        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert parsed.netloc == "localhost:9000"
        assert parsed.path == "/b/photo.png"
        assert query["X-Amz-Expires"] == ["300"]
        assert "X-Amz-Signature" in query

    @pytest.mark.asyncio
    async def test_get_url_differs_from_put_url(self, client):
        put_url = await client.presigned_put_url("b", "k", 60)
        get_url = await client.presigned_get_url("b", "k", 60)

        assert put_url != get_url
        assert parse_qs(urlparse(get_url).query)["X-Amz-Expires"] == ["60"]


class TestFactory:

    def test_mock_mode_returns_in_memory_client(self):
        assert isinstance(create_storage_client(mock_mode=True), MockObjectStoreClient)

    def test_real_mode_requires_config(self):
        with pytest.raises(ValueError):
            create_storage_client()

    def test_real_mode_builds_s3_client(self):
        config = StorageConfig(
            endpoint_url="http://minio:9000",
            access_key_id="a",
            secret_access_key="s",
        )
        assert isinstance(create_storage_client(config), S3ObjectStoreClient)


class TestRetries:
    """A failed call is sent once and never retried."""

    def test_client_is_configured_for_a_single_attempt(self, client):
        retries = client._s3_client.meta.config.retries
        assert retries["total_max_attempts"] == 1

    @pytest.mark.asyncio
    async def test_server_error_is_sent_exactly_once(self, client):
        sent = []

        def answer_with_server_error(request, **kwargs):
            sent.append(request.url)
            return AWSResponse(request.url, 500, {}, _RawBody(INTERNAL_ERROR_BODY))

        client._s3_client.meta.events.register("before-send.s3", answer_with_server_error)

        with pytest.raises(StorageError):
            await client.remove_object("b", "k")

        assert len(sent) == 1
