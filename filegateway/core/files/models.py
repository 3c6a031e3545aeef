"""
Domain models for stored files.

These describe objects in the bucket independently of boto3 or FastAPI.
The bytes themselves live in the storage backend; the gateway only
passes them through.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Optional


@dataclass(frozen=True)
class StoredObject:
    """Metadata for one object in the bucket."""
    key: str
    size: int
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None
    etag: Optional[str] = None
    url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError("Object size cannot be negative")


@dataclass
class ObjectListing:
    """A single page of objects as returned by the backend."""
    objects: list[StoredObject] = field(default_factory=list)
    is_truncated: bool = False

    @property
    def count(self) -> int:
        return len(self.objects)


@dataclass(frozen=True)
class UploadedFile:
    """Result of a successful upload."""
    original_name: str
    key: str
    size: int
    content_type: str
    url: str


@dataclass
class ObjectDownload:
    """
    An object body ready to be streamed to the client.

    `chunks` is consumed once; it wraps the backend's response body.
    """
    key: str
    chunks: Iterator[bytes]
    content_type: Optional[str] = None
    content_length: Optional[int] = None

    @property
    def media_type(self) -> str:
        return self.content_type or "application/octet-stream"
