"""
Unit tests for FileService against in-memory storage.
"""

import pytest

from filegateway.core.files.errors import (
    NotFound,
    PayloadTooLarge,
    UnsupportedMediaType,
    UpstreamError,
    ValidationError,
)
from filegateway.core.files.service import FileService
from filegateway.infrastructure.storage.client import MockStorageClient


@pytest.fixture
def service(storage) -> FileService:
    return FileService(storage, max_upload_bytes=1024, list_limit=5)


@pytest.fixture
def failing_service(failing_storage) -> FileService:
    return FileService(failing_storage)


class TestUpload:

    def test_upload_stores_bytes_under_generated_key(self, service, storage):
        uploaded = service.upload(b"hello", "notes.txt", "text/plain")

        assert uploaded.original_name == "notes.txt"
        assert uploaded.key.endswith(".txt")
        assert uploaded.size == 5
        assert uploaded.url == f"mock://mock-bucket/{uploaded.key}"
        assert storage.head_object(uploaded.key).content_type == "text/plain"

    def test_identical_uploads_get_distinct_keys(self, service):
        """No dedup: every upload is a new object."""
        first = service.upload(b"same", "a.txt", "text/plain")
        second = service.upload(b"same", "a.txt", "text/plain")
        assert first.key != second.key

    def test_missing_content_type_defaults_to_octet_stream(self, service):
        uploaded = service.upload(b"a,b", "data.csv", None)
        assert uploaded.content_type == "application/octet-stream"

    def test_no_file_is_validation_error(self, service, storage):
        with pytest.raises(ValidationError):
            service.upload(None, None, None)
        assert storage.calls == []

    def test_oversized_upload_never_reaches_backend(self, service, storage):
        with pytest.raises(PayloadTooLarge):
            service.upload(b"x" * 1025, "big.txt", "text/plain")
        assert storage.calls == []

    def test_disallowed_type_never_reaches_backend(self, service, storage):
        with pytest.raises(UnsupportedMediaType):
            service.upload(b"MZ", "setup.exe", "application/x-msdownload")
        assert storage.calls == []

    def test_backend_failure_is_labelled(self, failing_service):
        with pytest.raises(UpstreamError) as exc_info:
            failing_service.upload(b"hello", "notes.txt", "text/plain")
        assert exc_info.value.error == "Failed to upload file"
        assert exc_info.value.message == "Access Denied"


class TestListFiles:

    def test_never_exceeds_configured_limit(self, service):
        for i in range(8):
            service.upload(b"x", f"{i}.txt", "text/plain")

        listing = service.list_files()

        assert listing.count == 5
        assert listing.is_truncated is True

    def test_requested_limit_above_cap_is_clamped(self, service):
        for i in range(8):
            service.upload(b"x", f"{i}.txt", "text/plain")
        assert service.list_files(limit=50).count == 5

    def test_smaller_limit_is_honoured(self, service):
        for i in range(3):
            service.upload(b"x", f"{i}.txt", "text/plain")
        listing = service.list_files(limit=2)
        assert listing.count == 2
        assert listing.is_truncated is True

    def test_backend_returning_too_many_is_trimmed(self):
        """The cap holds even if a backend ignores MaxKeys."""
        class GreedyStorage(MockStorageClient):
            def list_objects(self, max_keys):
                return super().list_objects(max_keys * 10)

        storage = GreedyStorage()
        for i in range(20):
            storage.put_object(f"k{i}", b"x", "text/plain")

        listing = FileService(storage, list_limit=5).list_files()

        assert listing.count == 5
        assert listing.is_truncated is True

    def test_backend_failure_is_labelled(self, failing_service):
        with pytest.raises(UpstreamError) as exc_info:
            failing_service.list_files()
        assert exc_info.value.error == "Failed to list files"


class TestDownload:

    def test_download_returns_uploaded_bytes_and_type(self, service):
        uploaded = service.upload(b"\x89PNG data", "img.png", "image/png")

        download = service.download(uploaded.key)

        assert b"".join(download.chunks) == b"\x89PNG data"
        assert download.content_type == "image/png"
        assert download.content_length == 9

    def test_missing_key_is_not_found_after_head(self, service, storage):
        with pytest.raises(NotFound):
            service.download("missing.txt")
        assert storage.calls == ["head_object"]


class TestDelete:

    def test_delete_removes_object_from_listing(self, service):
        uploaded = service.upload(b"bye", "gone.txt", "text/plain")

        service.delete(uploaded.key)

        keys = [obj.key for obj in service.list_files().objects]
        assert uploaded.key not in keys

    def test_deleting_missing_key_is_not_found(self, service, storage):
        with pytest.raises(NotFound):
            service.delete("missing.txt")
        assert "delete_object" not in storage.calls

    def test_backend_failure_is_labelled(self, failing_service):
        with pytest.raises(UpstreamError) as exc_info:
            failing_service.delete("k")
        assert exc_info.value.error == "Failed to delete file"


class TestInfo:

    def test_info_reports_metadata(self, service):
        uploaded = service.upload(b"{}", "data.json", "application/json")

        obj = service.info(uploaded.key)

        assert obj.size == 2
        assert obj.content_type == "application/json"
        assert obj.last_modified is not None
        assert obj.etag == "99914b932bd37a50b983c5e7c90ae93b"

    def test_missing_key_is_not_found(self, service):
        with pytest.raises(NotFound):
            service.info("missing.txt")


class TestSignature:

    def test_storage_parameter_is_typed(self):
        import inspect

        parameter = inspect.signature(FileService.__init__).parameters["storage"]
        assert parameter.annotation == "StorageClient"
