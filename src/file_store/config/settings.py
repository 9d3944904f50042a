# src/file_store/config/settings.py
import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_BACKENDS = ["local", "memory", "s3"]


class Settings(BaseSettings):
    """
    Startup configuration for the file store.

    Configuration precedence:
    1. Keyword arguments (e.g. CLI options)
    2. Environment variables prefixed with FILE_STORE_
    3. .env file (if exists)
    4. Default values in this class

    The instance is frozen: it is built once at startup and handed to
    `create_app`, nothing mutates it afterwards.

    Usage:
        from file_store.config.settings import get_settings
        settings = get_settings()
        storage_dir = settings.storage_dir
    """

    # Application Settings
    app_name: str = Field(
        default="file-store",
        description="Application name"
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Address the HTTP server listens on"
    )

    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port the HTTP server listens on"
    )

    max_upload_bytes: int = Field(
        default=5_000_000,
        gt=0,
        description="Largest accepted request body, in bytes"
    )

    enable_docs: bool = Field(
        default=False,
        description="Serve the OpenAPI docs at /docs"
    )

    # Storage Configuration
    storage_backend: str = Field(
        default="local",
        description="Storage backend: local, memory, or s3"
    )

    storage_dir: str = Field(
        default="./files",
        description="Directory holding stored files for the local backend"
    )

    create_storage_dir: bool = Field(
        default=True,
        description="Create the storage directory at startup if it is missing"
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="file-store",
        description="S3 bucket for the s3 backend"
    )

    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("storage_backend", mode="before")
    @classmethod
    def normalize_storage_backend(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v):
        """Validate storage backend is one of the allowed values."""
        if v not in STORAGE_BACKENDS:
            raise ValueError(f"Invalid storage_backend: {v}. Must be one of {STORAGE_BACKENDS}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log_level: {v}")
        return level

    def as_display_dict(self) -> dict:
        """Configuration values worth showing to an operator, secrets left out."""
        return {
            "App Name": self.app_name,
            "Listen Address": f"{self.host}:{self.port}",
            "Max Upload Bytes": self.max_upload_bytes,
            "Storage Backend": self.storage_backend,
            "Storage Dir": self.storage_dir,
            "S3 Bucket": self.s3_bucket_name,
            "AWS Region": self.aws_region,
            "AWS Endpoint": self.aws_endpoint_url,
            "Log Level": self.log_level,
        }

    model_config = SettingsConfigDict(
        env_prefix="FILE_STORE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
