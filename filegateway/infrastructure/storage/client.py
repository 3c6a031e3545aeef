"""
Object storage client for uploaded files.

Supports AWS S3 and any S3-compatible store (MinIO, R2) through boto3,
with an in-memory mock for local development and tests.

This module is the only place that knows about botocore exceptions.
Every SDK failure is classified here into the file error taxonomy
(NotFound or UpstreamError), so callers never match on SDK error names.
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...core.files.errors import NotFound, UpstreamError
from ...core.files.models import ObjectDownload, ObjectListing, StoredObject

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})

DOWNLOAD_CHUNK_SIZE = 64 * 1024


@dataclass
class StorageConfig:
    """
    Configuration for S3-compatible storage.

    endpoint_url is only set for non-AWS stores; AWS derives the endpoint
    from the region.
    """
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    region: str
    endpoint_url: Optional[str] = None

    def object_url(self, key: str) -> str:
        """Public URL for an object. Access still depends on bucket policy."""
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"


class StorageClient(Protocol):
    """
    Protocol for bucket operations.

    Tests provide the in-memory implementation; production uses boto3.
    Every method raises NotFound or UpstreamError, never SDK exceptions.
    """

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        ...

    def head_object(self, key: str) -> StoredObject:
        """Probe an object and return its metadata."""
        ...

    def get_object(self, key: str) -> ObjectDownload:
        ...

    def list_objects(self, max_keys: int) -> ObjectListing:
        ...

    def delete_object(self, key: str) -> None:
        ...

    def object_url(self, key: str) -> str:
        ...

    def check_bucket(self) -> None:
        """Verify the bucket is reachable with the configured credentials."""
        ...


def classify_error(error: Exception, key: Optional[str] = None) -> Exception:
    """Translate a botocore exception into NotFound or UpstreamError."""
    if isinstance(error, ClientError):
        code = str(error.response.get("Error", {}).get("Code", ""))
        if code in NOT_FOUND_CODES:
            return NotFound(f"No object with key {key}" if key else None)
        message = error.response.get("Error", {}).get("Message") or code
        return UpstreamError(message)
    return UpstreamError(str(error))


def _strip_etag(etag: Optional[str]) -> Optional[str]:
    return etag.strip('"') if etag else etag


def _iter_body(body, chunk_size: int = DOWNLOAD_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield a botocore StreamingBody in chunks and close it afterwards."""
    try:
        yield from body.iter_chunks(chunk_size)
    finally:
        body.close()


class S3StorageClient:
    """
    S3 object storage client.

    boto3 clients are thread-safe, so one instance is built at startup and
    shared by every request handler.
    """

    def __init__(self, config: StorageConfig, s3_client=None) -> None:
        self._config = config

        if s3_client is None:
            boto_config = Config(signature_version="s3v4")
            s3_client = boto3.client(
                "s3",
                endpoint_url=config.endpoint_url,
                aws_access_key_id=config.access_key_id,
                aws_secret_access_key=config.secret_access_key,
                region_name=config.region,
                config=boto_config,
            )
        self._s3_client = s3_client

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "region": config.region,
                "endpoint": config.endpoint_url,
            }
        )

    @property
    def bucket_name(self) -> str:
        return self._config.bucket_name

    def object_url(self, key: str) -> str:
        return self._config.object_url(key)

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._s3_client.put_object(
                Bucket=self._config.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to upload object",
                extra={"key": key, "size_bytes": len(data), "error": str(e)}
            )
            raise classify_error(e, key) from e

        logger.info(
            "Uploaded object",
            extra={"key": key, "size_bytes": len(data), "content_type": content_type}
        )

    def head_object(self, key: str) -> StoredObject:
        try:
            response = self._s3_client.head_object(
                Bucket=self._config.bucket_name,
                Key=key,
            )
        except (ClientError, BotoCoreError) as e:
            error = classify_error(e, key)
            if isinstance(error, UpstreamError):
                logger.error(
                    "Failed to probe object",
                    extra={"key": key, "error": str(e)}
                )
            raise error from e

        return StoredObject(
            key=key,
            size=response.get("ContentLength", 0),
            last_modified=response.get("LastModified"),
            content_type=response.get("ContentType"),
            etag=_strip_etag(response.get("ETag")),
            url=self.object_url(key),
        )

    def get_object(self, key: str) -> ObjectDownload:
        try:
            response = self._s3_client.get_object(
                Bucket=self._config.bucket_name,
                Key=key,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to download object",
                extra={"key": key, "error": str(e)}
            )
            raise classify_error(e, key) from e

        return ObjectDownload(
            key=key,
            chunks=_iter_body(response["Body"]),
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength"),
        )

    def list_objects(self, max_keys: int) -> ObjectListing:
        try:
            response = self._s3_client.list_objects_v2(
                Bucket=self._config.bucket_name,
                MaxKeys=max_keys,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to list objects",
                extra={"bucket": self._config.bucket_name, "error": str(e)}
            )
            raise classify_error(e) from e

        objects = [
            StoredObject(
                key=item["Key"],
                size=item.get("Size", 0),
                last_modified=item.get("LastModified"),
                etag=_strip_etag(item.get("ETag")),
                url=self.object_url(item["Key"]),
            )
            for item in response.get("Contents", [])
        ]

        return ObjectListing(
            objects=objects,
            is_truncated=response.get("IsTruncated", False),
        )

    def delete_object(self, key: str) -> None:
        try:
            self._s3_client.delete_object(
                Bucket=self._config.bucket_name,
                Key=key,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to delete object",
                extra={"key": key, "error": str(e)}
            )
            raise classify_error(e, key) from e

        logger.info("Deleted object", extra={"key": key})

    def check_bucket(self) -> None:
        try:
            self._s3_client.head_bucket(Bucket=self._config.bucket_name)
        except (ClientError, BotoCoreError) as e:
            raise classify_error(e) from e


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

@dataclass
class _MockObject:
    data: bytes
    content_type: str
    last_modified: datetime
    etag: str


class MockStorageClient:
    """
    In-memory storage for local development and tests.

    Objects live in a dict keyed by object key, in insertion order, and
    URLs are mock URIs. Not suitable for production.
    """

    def __init__(self, bucket_name: str = "mock-bucket") -> None:
        self.bucket_name = bucket_name
        self._objects: dict[str, _MockObject] = {}
        logger.info("Initialized mock storage client (in-memory)")

    def object_url(self, key: str) -> str:
        return f"mock://{self.bucket_name}/{key}"

    def put_object(self, key: str, data: bytes, content_type: str) -> None:
        self._objects[key] = _MockObject(
            data=data,
            content_type=content_type,
            last_modified=datetime.now(timezone.utc),
            etag=hashlib.md5(data).hexdigest(),
        )
        logger.debug(
            "Stored object in mock storage",
            extra={"key": key, "size_bytes": len(data)}
        )

    def _get(self, key: str) -> _MockObject:
        obj = self._objects.get(key)
        if obj is None:
            raise NotFound(f"No object with key {key}")
        return obj

    def head_object(self, key: str) -> StoredObject:
        obj = self._get(key)
        return StoredObject(
            key=key,
            size=len(obj.data),
            last_modified=obj.last_modified,
            content_type=obj.content_type,
            etag=obj.etag,
            url=self.object_url(key),
        )

    def get_object(self, key: str) -> ObjectDownload:
        obj = self._get(key)
        return ObjectDownload(
            key=key,
            chunks=iter([obj.data]),
            content_type=obj.content_type,
            content_length=len(obj.data),
        )

    def list_objects(self, max_keys: int) -> ObjectListing:
        # One snapshot, so a concurrent delete can't remove an entry mid-listing
        items = list(self._objects.items())
        objects = [
            StoredObject(
                key=key,
                size=len(obj.data),
                last_modified=obj.last_modified,
                etag=obj.etag,
                url=self.object_url(key),
            )
            for key, obj in items[:max_keys]
        ]
        return ObjectListing(objects=objects, is_truncated=len(items) > max_keys)

    def delete_object(self, key: str) -> None:
        # S3 deletes are idempotent; mirror that here.
        self._objects.pop(key, None)
        logger.debug("Deleted object from mock storage", extra={"key": key})

    def check_bucket(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> StorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory client

    Returns:
        StorageClient implementation (S3 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3StorageClient(config)
