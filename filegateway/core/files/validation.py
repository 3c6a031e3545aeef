"""
Upload validation.

Runs before anything touches the storage backend. A file is accepted when
either its extension or its declared MIME type is on the allow-list;
browsers are inconsistent about MIME types for CSV and Office files, so
requiring both would reject legitimate uploads.
"""

from typing import Optional

from .errors import PayloadTooLarge, UnsupportedMediaType, ValidationError
from .keys import file_extension

ALLOWED_EXTENSIONS = frozenset({
    "jpeg", "jpg", "png", "gif",
    "pdf", "doc", "docx", "txt",
    "zip", "rar",
    "csv", "xlsx", "xls",
    "json", "xml",
})

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg", "image/jpg", "image/png", "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain", "text/csv",
    "application/zip", "application/x-rar-compressed",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/json", "application/xml", "text/xml",
})


def is_allowed_file(filename: str, content_type: Optional[str]) -> bool:
    if file_extension(filename) in ALLOWED_EXTENSIONS:
        return True
    return (content_type or "").lower() in ALLOWED_MIME_TYPES


def validate_upload(
    filename: Optional[str],
    content_type: Optional[str],
    size: int,
    max_size_bytes: int,
) -> None:
    """
    Raise the matching error if an upload must be rejected.

    Checks run in the order a client would want to hear about them:
    missing file, then type, then size.
    """
    if not filename:
        raise ValidationError(error="No file provided")

    if not is_allowed_file(filename, content_type):
        raise UnsupportedMediaType(
            f"Invalid file type: {content_type}. "
            "Allowed types: images, documents, CSV, Excel, JSON, XML and archives."
        )

    if size > max_size_bytes:
        raise PayloadTooLarge(
            f"Maximum upload size is {max_size_bytes // (1024 * 1024)}MB"
        )
