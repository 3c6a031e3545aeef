"""
FastAPI dependency injection.

Dependencies provide the storage client, file service and configuration
to route handlers. The storage client is built once by the application
factory and kept on `app.state`; nothing here creates clients per request
or holds module-level singletons.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from ..config.settings import Settings
from ..core.files.errors import NotConfigured
from ..core.files.service import FileService
from ..infrastructure.storage.client import StorageClient

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def get_storage_client(request: Request) -> StorageClient:
    """
    Provide the shared storage client.

    Raises NotConfigured when startup found no usable storage configuration.
    """
    storage = request.app.state.storage
    if storage is None:
        raise NotConfigured(request.app.state.missing_config)
    return storage


def get_file_service(
    settings: Annotated[Settings, Depends(get_app_settings)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> FileService:
    """FileService is stateless, so a fresh one per request is free."""
    return FileService(
        storage,
        max_upload_bytes=settings.max_upload_size_bytes,
        list_limit=settings.list_max_keys,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

SettingsDep = Annotated[Settings, Depends(get_app_settings)]
StorageClientDep = Annotated[StorageClient, Depends(get_storage_client)]
FileServiceDep = Annotated[FileService, Depends(get_file_service)]
