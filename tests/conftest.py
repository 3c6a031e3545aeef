"""
Shared fixtures.

API tests build their own application through create_app with an
in-memory storage client, so no test needs credentials or network.
"""

import pytest
from fastapi.testclient import TestClient

from filegateway.config.settings import Settings
from filegateway.core.files.errors import UpstreamError
from filegateway.infrastructure.storage.client import MockStorageClient
from filegateway.main import create_app


class RecordingStorageClient(MockStorageClient):
    """Mock storage that records which backend calls were made."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    def put_object(self, key, data, content_type):
        self.calls.append("put_object")
        super().put_object(key, data, content_type)

    def head_object(self, key):
        self.calls.append("head_object")
        return super().head_object(key)

    def get_object(self, key):
        self.calls.append("get_object")
        return super().get_object(key)

    def list_objects(self, max_keys):
        self.calls.append("list_objects")
        return super().list_objects(max_keys)

    def delete_object(self, key):
        self.calls.append("delete_object")
        super().delete_object(key)


class FailingStorageClient(MockStorageClient):
    """Storage whose every call fails like an unreachable backend."""

    def _fail(self, *args, **kwargs):
        raise UpstreamError("Access Denied")

    put_object = _fail
    head_object = _fail
    get_object = _fail
    list_objects = _fail
    delete_object = _fail
    check_bucket = _fail


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's .env file."""
    values = {
        "aws_access_key_id": "test-access-key",
        "aws_secret_access_key": "test-secret-key",
        "aws_region": "us-east-1",
        "s3_bucket_name": "test-bucket",
        "storage_mock_mode": False,
        "client_build_dir": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def storage() -> RecordingStorageClient:
    return RecordingStorageClient()


@pytest.fixture
def client(settings, storage) -> TestClient:
    return TestClient(create_app(settings=settings, storage=storage))


@pytest.fixture
def unconfigured_client() -> TestClient:
    settings = make_settings(
        aws_access_key_id="",
        aws_secret_access_key="",
        aws_region="",
        s3_bucket_name="",
    )
    return TestClient(create_app(settings=settings))


@pytest.fixture
def failing_storage() -> FailingStorageClient:
    return FailingStorageClient()


@pytest.fixture
def failing_client(settings, failing_storage) -> TestClient:
    return TestClient(create_app(settings=settings, storage=failing_storage))


@pytest.fixture
def build_client(storage):
    """Build a client over the shared recording storage with custom settings."""
    def _build(**overrides) -> TestClient:
        return TestClient(create_app(settings=make_settings(**overrides), storage=storage))
    return _build
