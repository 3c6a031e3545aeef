"""
Error taxonomy for file operations.

These are the only errors the API layer knows about. The storage adapter
translates SDK exceptions into them, and the API renders each one as a
JSON body with its status code.
"""

from typing import Optional


class FileGatewayError(Exception):
    """Base class for every error surfaced to clients."""

    status_code: int = 500
    error: str = "Something went wrong!"

    def __init__(self, message: Optional[str] = None, *, error: Optional[str] = None) -> None:
        super().__init__(message or error or self.error)
        self.message = message
        if error is not None:
            self.error = error

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body


class ValidationError(FileGatewayError):
    """Missing or malformed input."""

    status_code = 400
    error = "Invalid request"


class PayloadTooLarge(FileGatewayError):
    """Upload exceeds the size ceiling."""

    status_code = 413
    error = "File too large"


class UnsupportedMediaType(FileGatewayError):
    """Upload is outside the extension/MIME allow-list."""

    status_code = 415
    error = "Unsupported file type"


class NotFound(FileGatewayError):
    """The requested object does not exist in the bucket."""

    status_code = 404
    error = "File not found"


class UpstreamError(FileGatewayError):
    """The storage backend call failed."""

    status_code = 500
    error = "Storage backend error"


class NotConfigured(FileGatewayError):
    """Storage credentials or bucket are not configured."""

    status_code = 503
    error = "Storage not configured"

    def __init__(self, missing_vars: Optional[list[str]] = None) -> None:
        super().__init__(
            "Please set up your environment variables "
            "(AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_REGION, S3_BUCKET_NAME)"
        )
        self.missing_vars = missing_vars or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["missingVars"] = self.missing_vars
        body["hint"] = "Copy .env.example to .env and fill in your credentials"
        return body
