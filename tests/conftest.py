"""
Pytest configuration and fixtures.

API tests run the real application against the in-memory object store.
TestClient is used as a context manager so the lifespan (bucket
provisioning, access layer, post register) runs for every test.
"""

import pytest
from fastapi.testclient import TestClient

from objectgate.config.settings import Settings
from objectgate.main import create_app


@pytest.fixture
def settings() -> Settings:
    """Mock-mode settings that ignore any local .env file."""
    return Settings(
        _env_file=None,
        storage_mock_mode=True,
        storage_bucket="test-bucket",
        presigned_url_expiry_seconds=300,
        max_upload_size_mb=1,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
