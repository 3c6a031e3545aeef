"""
File operations over a single bucket.

FileService is framework-agnostic: it takes a storage client and limits,
and raises only the errors in `errors`. The API layer maps those to HTTP.
"""

import logging
from typing import TYPE_CHECKING, Optional

from .errors import NotFound, UpstreamError
from .keys import generate_object_key
from .models import ObjectDownload, ObjectListing, StoredObject, UploadedFile
from .validation import validate_upload

if TYPE_CHECKING:
    from ...infrastructure.storage.client import StorageClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_LIST_LIMIT = 100


def _relabel(error: UpstreamError, label: str) -> UpstreamError:
    """Attach an operation-specific label to a backend failure."""
    return UpstreamError(error.message, error=label)


class FileService:
    """
    Upload, list, download, inspect and delete files.

    Every call is independent. Upload always creates a new key, even for
    identical content.
    """

    def __init__(
        self,
        storage: "StorageClient",
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        list_limit: int = DEFAULT_LIST_LIMIT,
    ) -> None:
        self._storage = storage
        self.max_upload_bytes = max_upload_bytes
        self.list_limit = list_limit

    def upload(
        self,
        data: Optional[bytes],
        original_name: Optional[str],
        content_type: Optional[str],
    ) -> UploadedFile:
        """
        Validate and store one file under a freshly generated key.

        Validation runs before the backend is touched, so oversized or
        disallowed files never reach storage.
        """
        size = len(data) if data is not None else 0
        validate_upload(
            original_name if data is not None else None,
            content_type,
            size,
            self.max_upload_bytes,
        )

        key = generate_object_key(original_name)
        content_type = content_type or "application/octet-stream"

        try:
            self._storage.put_object(key, data, content_type)
        except UpstreamError as e:
            raise _relabel(e, "Failed to upload file") from e

        logger.info(
            "File uploaded",
            extra={"key": key, "original_name": original_name, "size_bytes": size}
        )

        return UploadedFile(
            original_name=original_name,
            key=key,
            size=size,
            content_type=content_type,
            url=self._storage.object_url(key),
        )

    def list_files(self, limit: Optional[int] = None) -> ObjectListing:
        """
        Return up to `limit` objects, capped at the configured list limit.

        No cursor is exposed; `is_truncated` tells the caller more exist.
        """
        if limit is None or limit > self.list_limit:
            limit = self.list_limit
        limit = max(limit, 0)

        try:
            listing = self._storage.list_objects(limit)
        except UpstreamError as e:
            raise _relabel(e, "Failed to list files") from e

        if listing.count > limit:
            listing = ObjectListing(objects=listing.objects[:limit], is_truncated=True)

        logger.debug("Listed files", extra={"count": listing.count})
        return listing

    def download(self, key: str) -> ObjectDownload:
        self._probe(key, "Failed to download file")
        try:
            return self._storage.get_object(key)
        except UpstreamError as e:
            raise _relabel(e, "Failed to download file") from e

    def delete(self, key: str) -> None:
        self._probe(key, "Failed to delete file")
        try:
            self._storage.delete_object(key)
        except UpstreamError as e:
            raise _relabel(e, "Failed to delete file") from e

        logger.info("File deleted", extra={"key": key})

    def info(self, key: str) -> StoredObject:
        return self._probe(key, "Failed to get file info")

    def _probe(self, key: str, label: str) -> StoredObject:
        """HEAD the object so a missing key surfaces as NotFound."""
        try:
            return self._storage.head_object(key)
        except NotFound:
            logger.debug("Object not found", extra={"key": key})
            raise
        except UpstreamError as e:
            raise _relabel(e, label) from e
