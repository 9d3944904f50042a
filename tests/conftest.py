import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from file_store.adapters.storage import InMemoryStorage
from file_store.config.settings import Settings
from file_store.main import create_app
from tests.consts import TEST_BUCKET_NAME, TEST_MAX_UPLOAD_BYTES


@pytest.fixture
def storage_dir(tmp_path):
    return tmp_path / "files"


@pytest.fixture
def settings(storage_dir) -> Settings:
    return Settings(
        storage_dir=str(storage_dir),
        max_upload_bytes=TEST_MAX_UPLOAD_BYTES,
        _env_file=None,
    )


@pytest.fixture
def client(settings) -> TestClient:
    """Client for an app storing files in a temporary directory."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def memory_client(settings, memory_storage) -> TestClient:
    """Client for an app backed by an in-memory store."""
    with TestClient(create_app(settings, storage=memory_storage)) as test_client:
        yield test_client


@pytest.fixture
def mocked_aws(monkeypatch):
    """Mock S3 with a test bucket already created."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    with mock_aws():
        s3_client = boto3.client("s3", region_name="us-east-1")
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield s3_client
