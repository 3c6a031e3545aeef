"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables (or a local .env file).
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without a real bucket.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Storage credentials have no usable defaults: they must be supplied
    externally. For lists (like cors_origin), use comma-separated values.
    """

    # API Configuration
    api_title: str = "S3 File Manager API"
    api_version: str = "1.0.0"
    environment: str = Field(
        default="development",
        description="Deployment environment. 'development' exposes error messages in 500 responses."
    )

    # Storage Configuration
    aws_access_key_id: str = Field(
        default="",
        description="Object storage access key ID"
    )
    aws_secret_access_key: str = Field(
        default="",
        description="Object storage secret access key"
    )
    aws_region: str = Field(
        default="",
        description="Region the bucket lives in"
    )
    s3_bucket_name: str = Field(
        default="",
        description="Bucket holding every uploaded file"
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Endpoint override for S3-compatible stores (MinIO, R2). Leave unset for AWS."
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory storage instead of a real bucket."
    )

    # Application Behavior
    max_upload_size_mb: int = Field(
        default=10,
        description="Maximum size of a single uploaded file in MB."
    )
    list_max_keys: int = Field(
        default=100,
        description="Maximum number of objects returned by the file listing."
    )
    client_build_dir: Optional[str] = Field(
        default=None,
        description="Directory of a pre-built web client to serve at '/'."
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origin: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origin == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    def validate_required_fields(self) -> list[str]:
        """
        Return the names of required storage variables that are unset.

        In mock mode nothing is required. This is separate from Pydantic
        validation so the service can still start (and report 503s) when
        credentials are missing.
        """
        if self.storage_mock_mode:
            return []

        required = {
            "AWS_ACCESS_KEY_ID": self.aws_access_key_id,
            "AWS_SECRET_ACCESS_KEY": self.aws_secret_access_key,
            "AWS_REGION": self.aws_region,
            "S3_BUCKET_NAME": self.s3_bucket_name,
        }
        return [name for name, value in required.items() if not value]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process. For tests, build a Settings
    directly or call get_settings.cache_clear() to reset.
    """
    return Settings()
