"""
Unit tests for configuration parsing and the startup configuration check.
"""

from filegateway.config.settings import Settings
from filegateway.infrastructure.storage.client import MockStorageClient, S3StorageClient
from filegateway.main import build_storage_client


def make(**values) -> Settings:
    values.setdefault("aws_access_key_id", "")
    values.setdefault("aws_secret_access_key", "")
    values.setdefault("aws_region", "")
    values.setdefault("s3_bucket_name", "")
    return Settings(_env_file=None, **values)


class TestValidateRequiredFields:

    def test_reports_every_missing_variable(self):
        assert make().validate_required_fields() == [
            "AWS_ACCESS_KEY_ID",
            "AWS_SECRET_ACCESS_KEY",
            "AWS_REGION",
            "S3_BUCKET_NAME",
        ]

    def test_partial_configuration(self):
        settings = make(aws_access_key_id="id", aws_secret_access_key="secret")
        assert settings.validate_required_fields() == ["AWS_REGION", "S3_BUCKET_NAME"]

    def test_mock_mode_requires_nothing(self):
        assert make(storage_mock_mode=True).validate_required_fields() == []


class TestDerivedValues:

    def test_cors_origins_are_split_and_trimmed(self):
        settings = make(cors_origin="http://a.test, http://b.test ,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_wildcard_cors(self):
        assert make(cors_origin="*").cors_origins_list == ["*"]

    def test_upload_ceiling_defaults_to_10_mib(self):
        assert make().max_upload_size_bytes == 10 * 1024 * 1024

    def test_list_cap_defaults_to_100(self):
        assert make().list_max_keys == 100


class TestBuildStorageClient:

    def test_missing_configuration_builds_no_client(self):
        storage, missing = build_storage_client(make(aws_region="us-east-1"))
        assert storage is None
        assert "AWS_REGION" not in missing
        assert "S3_BUCKET_NAME" in missing

    def test_mock_mode_builds_in_memory_client(self):
        storage, missing = build_storage_client(make(storage_mock_mode=True))
        assert isinstance(storage, MockStorageClient)
        assert missing == []

    def test_full_configuration_builds_s3_client(self):
        storage, missing = build_storage_client(make(
            aws_access_key_id="id",
            aws_secret_access_key="secret",
            aws_region="us-east-1",
            s3_bucket_name="bucket",
        ))
        assert isinstance(storage, S3StorageClient)
        assert storage.bucket_name == "bucket"
        assert missing == []


class TestEntryPoint:

    def test_importing_main_builds_no_app(self):
        import filegateway.main

        assert not hasattr(filegateway.main, "app")

    def test_run_starts_uvicorn_with_app_factory(self, monkeypatch):
        import uvicorn

        import filegateway.main

        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))

        filegateway.main.run()

        [(args, kwargs)] = calls
        assert args == ("filegateway.main:create_app",)
        assert kwargs["factory"] is True
