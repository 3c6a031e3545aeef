"""
File domain: stored objects, key generation, upload validation, and the
FileService that ties them to a storage client.
"""

from .errors import (
    FileGatewayError,
    NotConfigured,
    NotFound,
    PayloadTooLarge,
    UnsupportedMediaType,
    UpstreamError,
    ValidationError,
)
from .keys import generate_object_key
from .models import ObjectDownload, ObjectListing, StoredObject, UploadedFile
from .service import FileService

__all__ = [
    "FileGatewayError",
    "FileService",
    "NotConfigured",
    "NotFound",
    "ObjectDownload",
    "ObjectListing",
    "PayloadTooLarge",
    "StoredObject",
    "UnsupportedMediaType",
    "UploadedFile",
    "UpstreamError",
    "ValidationError",
    "generate_object_key",
]
