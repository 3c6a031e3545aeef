"""
File management API endpoints.

Each endpoint is a thin wrapper over one FileService call. Handlers are
plain functions: FastAPI runs them in its threadpool, which keeps the
blocking boto3 calls off the event loop.

Errors raised by the service (NotFound, UpstreamError, ...) are rendered
by the application-level exception handler, not here.
"""

import logging
from datetime import datetime
from typing import Annotated, Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...core.files.errors import ValidationError
from ..dependencies import FileServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class CamelModel(BaseModel):
    """Serializes field names as camelCase, which is what the web client reads."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadedFileInfo(CamelModel):
    original_name: str = Field(description="Filename as sent by the client")
    file_name: str = Field(description="Generated object key")
    size: int = Field(description="Size in bytes")
    url: str = Field(description="Public object URL")
    key: str = Field(description="Object key (same as file_name)")
    content_type: str = Field(description="Content type stored with the object")


class UploadResponse(CamelModel):
    message: str
    file: UploadedFileInfo


class FileSummary(CamelModel):
    key: str
    size: int
    last_modified: Optional[datetime] = None
    url: str


class FileListResponse(CamelModel):
    files: list[FileSummary]
    count: int
    is_truncated: bool = Field(description="True if the bucket holds more objects than returned")


class DeleteResponse(CamelModel):
    message: str
    filename: str


class FileInfoResponse(CamelModel):
    filename: str
    size: int
    content_type: Optional[str] = None
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    url: str


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None


NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": "File not found"}}


def content_disposition(filename: str) -> str:
    """
    Attachment header safe for any key.

    Header values are latin-1 on the wire, so the plain `filename` gets an
    ASCII fallback and the real name goes in `filename*` (RFC 5987).
    """
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("\\", "\\\\").replace('"', '\\"')
    encoded = quote(filename, safe="")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload a file",
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
    },
)
def upload_file(
    service: FileServiceDep,
    file: Annotated[Optional[UploadFile], File(description="File to upload")] = None,
) -> UploadResponse:
    """
    Store one file in the bucket under a generated key.

    At most one byte past the size ceiling is read, which is enough to
    reject an oversized file without buffering all of it.
    """
    if file is None:
        raise ValidationError(error="No file provided")

    data = file.file.read(service.max_upload_bytes + 1)

    logger.info(
        "Upload received",
        extra={
            "upload_filename": file.filename,
            "content_type": file.content_type,
            "size_bytes": len(data),
        }
    )

    uploaded = service.upload(data, file.filename, file.content_type)

    return UploadResponse(
        message="File uploaded successfully",
        file=UploadedFileInfo(
            original_name=uploaded.original_name,
            file_name=uploaded.key,
            size=uploaded.size,
            url=uploaded.url,
            key=uploaded.key,
            content_type=uploaded.content_type,
        ),
    )


@router.get(
    "/files",
    response_model=FileListResponse,
    summary="List files",
    description="Lists up to the configured cap (100 by default). No pagination cursor.",
)
def list_files(
    service: FileServiceDep,
    limit: Annotated[Optional[int], Query(ge=1)] = None,
) -> FileListResponse:
    listing = service.list_files(limit)

    return FileListResponse(
        files=[
            FileSummary(
                key=obj.key,
                size=obj.size,
                last_modified=obj.last_modified,
                url=obj.url,
            )
            for obj in listing.objects
        ],
        count=listing.count,
        is_truncated=listing.is_truncated,
    )


@router.get(
    "/download/{filename}",
    response_class=StreamingResponse,
    summary="Download a file",
    responses=NOT_FOUND_RESPONSE,
)
def download_file(filename: str, service: FileServiceDep) -> StreamingResponse:
    # Header first: nothing may fail between opening the body and streaming it
    headers = {"Content-Disposition": content_disposition(filename)}

    download = service.download(filename)
    if download.content_length is not None:
        headers["Content-Length"] = str(download.content_length)

    return StreamingResponse(
        download.chunks,
        media_type=download.media_type,
        headers=headers,
    )


@router.delete(
    "/delete/{filename}",
    response_model=DeleteResponse,
    summary="Delete a file",
    responses=NOT_FOUND_RESPONSE,
)
def delete_file(filename: str, service: FileServiceDep) -> DeleteResponse:
    service.delete(filename)
    return DeleteResponse(message="File deleted successfully", filename=filename)


@router.get(
    "/info/{filename}",
    response_model=FileInfoResponse,
    summary="Get file metadata",
    responses=NOT_FOUND_RESPONSE,
)
def file_info(filename: str, service: FileServiceDep) -> FileInfoResponse:
    obj = service.info(filename)
    return FileInfoResponse(
        filename=obj.key,
        size=obj.size,
        content_type=obj.content_type,
        last_modified=obj.last_modified,
        etag=obj.etag,
        url=obj.url,
    )
