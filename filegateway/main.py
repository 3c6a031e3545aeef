"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
There is no module-level app: importing this module builds no storage
client. Servers call the create_app factory, and tests call it with their
own settings and storage client.

For local development:
    uvicorn --factory filegateway.main:create_app --reload

For production:
    gunicorn "filegateway.main:create_app()" -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api.routes import files, health
from .config.settings import Settings, get_settings
from .core.files.errors import FileGatewayError, NotConfigured
from .infrastructure.storage.client import (
    StorageClient,
    StorageConfig,
    create_storage_client,
)

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


def build_storage_client(settings: Settings) -> tuple[Optional[StorageClient], list[str]]:
    """
    Run the startup configuration check and build the storage client.

    Returns (client, missing_fields). The client is None when required
    configuration is absent; the /api guard then answers 503.
    """
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.warning(
            "Missing storage configuration; API endpoints will return 503",
            extra={"missing_fields": missing_fields}
        )
        return None, missing_fields

    if settings.storage_mock_mode:
        return create_storage_client(mock_mode=True), []

    config = StorageConfig(
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
        bucket_name=settings.s3_bucket_name,
        region=settings.aws_region,
        endpoint_url=settings.s3_endpoint_url,
    )
    return create_storage_client(config=config), []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup state and shutdown."""
    settings: Settings = app.state.settings

    logger.info(
        "File gateway starting",
        extra={
            "version": __version__,
            "bucket": settings.s3_bucket_name,
            "region": settings.aws_region,
            "mock_mode": settings.storage_mock_mode,
            "configured": app.state.storage is not None,
        }
    )

    yield

    logger.info("File gateway shutting down")


def _is_api_path(path: str) -> bool:
    return path == "/api" or path.startswith("/api/")


class ClientStaticFiles(StaticFiles):
    """
    Static files for a single-page web client.

    Unknown paths outside /api and /health get index.html, so client-side
    routes survive a page reload.
    """

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            request_path = scope["path"]
            if exc.status_code != 404:
                raise
            if _is_api_path(request_path) or request_path.startswith("/health"):
                raise
            return await super().get_response("index.html", scope)


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[StorageClient] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Configuration; loaded from the environment if omitted.
        storage: Pre-built storage client. When given, the configuration
            check is skipped and this client serves every request.
    """
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    if storage is None:
        storage, missing_config = build_storage_client(settings)
    else:
        missing_config = []

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Upload, list, download, inspect and delete files in an S3 bucket.

        All `/api` endpoints return 503 until storage credentials are configured.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.missing_config = missing_config

    @app.middleware("http")
    async def require_storage_config(request: Request, call_next):
        """Answer every /api request with 503 while storage is unconfigured."""
        if _is_api_path(request.url.path) and request.app.state.storage is None:
            error = NotConfigured(request.app.state.missing_config)
            return JSONResponse(status_code=error.status_code, content=error.to_dict())
        return await call_next(request)

    # CORS is added last so it wraps the guard and 503s carry CORS headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        files.router,
        prefix="/api",
        tags=["Files"],
    )

    @app.exception_handler(FileGatewayError)
    async def file_gateway_error_handler(request: Request, exc: FileGatewayError):
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error": str(exc),
                }
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            content = {"error": "Route not found"}
        else:
            content = {"error": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "message": str(exc.errors())},
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Outside development this keeps stack traces and internal messages
        away from clients. The full error is logged server-side.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": "Something went wrong!",
                "message": str(exc) if settings.is_development else "Internal server error",
            }
        )

    client_dir = Path(settings.client_build_dir) if settings.client_build_dir else None
    if client_dir is not None and client_dir.is_dir():
        # Mounted last so API and health routes take precedence
        app.mount("/", ClientStaticFiles(directory=client_dir, html=True), name="client")
        logger.info("Serving web client", extra={"directory": str(client_dir)})
    else:
        @app.get("/", include_in_schema=False)
        async def root():
            return {
                "message": "S3 File Manager API",
                "version": __version__,
                "docs": "/docs",
                "health": "/health",
            }

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


def run() -> None:
    """Run the service with uvicorn using HOST/PORT from settings."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "filegateway.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
